"""nestgit: git status aggregation across nested repositories."""

__version__ = "0.1.0"
