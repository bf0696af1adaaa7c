"""Page-O-Matic: static content and diagram collection pipeline."""

__version__ = "0.1.0"
