"""Church Directory: site settings service."""

__version__ = "0.1.0"
