"""Command-line application."""

from .cli import main

__all__ = ["main"]
