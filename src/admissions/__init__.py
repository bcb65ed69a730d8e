"""Student admission lifecycle and account identifier service."""

__version__ = "0.1.0"
