"""Concrete adapters for the interfaces in ``reform_hub.interfaces``."""
