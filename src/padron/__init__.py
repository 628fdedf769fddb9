"""Padron: admin client for person records behind a REST endpoint."""

__version__ = "0.1.0"
