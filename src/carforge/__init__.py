"""CarForge: vehicle side-profile silhouettes with posed occupants."""

__version__ = "0.1.0"
