"""Repository contract checks for required files and branch protection."""

__version__ = "0.1.0"
