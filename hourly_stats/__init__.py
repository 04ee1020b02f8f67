"""Schema definition and tooling for the hourly per-user action stats table."""

__version__ = "0.1.0"
