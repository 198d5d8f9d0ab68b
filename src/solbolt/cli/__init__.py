"""
CLI module for solbolt commands.

This module provides the command-line interface for solbolt,
including the annotate, resolve and compile commands.
"""

from .main import main

__all__ = [
    'main',
]
