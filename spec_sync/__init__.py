"""spec-sync: keep API specifications in a target repository in sync."""

__version__ = "0.3.0"
