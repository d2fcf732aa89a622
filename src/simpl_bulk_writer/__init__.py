"""Bulk file writer: validate, reconcile, partition and write job output."""

__version__ = "0.1.0"

__all__ = ["__version__"]
