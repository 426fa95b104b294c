"""GPS subscription billing and vendor reconciliation."""

__version__ = "0.1.0"
