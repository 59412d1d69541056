"""
Entry point for running smtsetup as a module.

Usage: python -m smtsetup [command] [options]
"""

from smtsetup.cli.parser import main

if __name__ == "__main__":
    main()
