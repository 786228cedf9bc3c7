"""Lumina: admin password gate and cloud sync for the Lumina media app."""

__version__ = "0.1.0"
