"""dataentry: keypad-driven text entry with automatic submission rules."""

from dataentry.__version__ import __version__

__all__ = ["__version__"]
