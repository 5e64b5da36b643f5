"""dzyne - design profiles and design tooling for AI coding assistants."""

__version__ = "0.1.0"
