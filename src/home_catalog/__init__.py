"""Browsable real-estate listing catalog: search, filter, sort and favorite listings."""

__version__ = "0.1.0"
