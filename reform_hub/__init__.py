"""reformHub: search and contribution backend for criminal-justice reform resources."""

__version__ = "0.1.0"
