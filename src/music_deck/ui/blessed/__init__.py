"""Fullscreen terminal UI built on blessed."""

from .app import run_interactive_ui

__all__ = ["run_interactive_ui"]
