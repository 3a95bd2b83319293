"""
Theologos - Command Line Interface

Typer application for browsing the library from a terminal.
"""
from cli.main import app, main

__all__ = ["app", "main"]
