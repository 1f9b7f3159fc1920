"""Code Studio API - project persistence and version history for the code editor."""

__version__ = "0.1.0"
