"""Padel players, couples and tournaments backend."""

__version__ = "0.1.0"
