"""
CLI layer for kubeship.

A Typer application with one command per action.  The actions live in
``kubeship.deploy``; this package handles terminal transport only:
argument parsing, mapping errors to exit codes, and table rendering.

Entry point::

    kubeship --help
"""

from kubeship.cli.app import app

__all__ = ["app"]
