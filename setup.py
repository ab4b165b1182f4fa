"""
Setup script for deutschmeister.

DeutschMeister is a terminal vocabulary trainer for German/Spanish word
pairs. It schedules reviews with SM-2 and keeps a bounded pool of words
in active learning:

1. Graded recall - forgot/hard/good/easy drives the next review time
2. Active pool - at most 50 unmastered words are learned at once
3. Maintenance - mastered words still come back when due

The 'deutschmeister' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="deutschmeister",
    version="1.0.0",
    description="Spaced repetition vocabulary trainer with an active learning pool",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="DeutschMeister",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"deutschmeister.data": ["*.json"]},
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "deutschmeister=deutschmeister.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition vocabulary german cli",
)
