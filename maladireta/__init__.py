"""Client registry and direct-mail campaigns with per-account data isolation."""

__version__ = "1.0.0"
