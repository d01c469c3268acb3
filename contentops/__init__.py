"""contentops: content operations tooling."""

__version__ = "0.1.0"
