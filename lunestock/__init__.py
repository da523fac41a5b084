"""LuneStock: inventory and sales management for a small clothing shop."""

__version__ = "0.1.0"
