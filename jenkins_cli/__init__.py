"""Jenkins CLI - trigger, inspect and follow Jenkins builds from the terminal."""

__version__ = "0.1.0"
