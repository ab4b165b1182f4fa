"""
Entry point for running DeutschMeister as a module.

Usage:
    python -m deutschmeister study
    python -m deutschmeister stats
    python -m deutschmeister --help
"""
from .cli import main

if __name__ == "__main__":
    main()
