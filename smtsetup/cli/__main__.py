"""
Entry point for running smtsetup CLI as a module.

Usage: python -m smtsetup.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
