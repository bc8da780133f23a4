"""textify: turn a project tree into a single annotated text document."""

__version__ = "0.3.0"
