"""PTM BMUP Setting API: member management backend."""

__version__ = "1.0.0"
