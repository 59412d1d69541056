"""
smtsetup CLI module.

This module provides the command-line interface for smtsetup.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
