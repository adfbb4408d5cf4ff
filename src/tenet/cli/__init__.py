"""Tenet CLI."""

from tenet.cli.main import main

__all__ = ["main"]
