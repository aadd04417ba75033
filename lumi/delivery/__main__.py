"""
Entry point for running the Lumi CLI as a module.

Usage:
    python -m lumi.delivery answer alice fractions-1 --correct
    python -m lumi.delivery progress alice
    python -m lumi.delivery --help
"""
from .cli import main

if __name__ == "__main__":
    main()
