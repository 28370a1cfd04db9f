"""Record keeping for a pastoral visitation ministry."""

__version__ = "0.1.0"
