"""Academic plan (PPA) lifecycle service."""

__version__ = "0.3.0"
