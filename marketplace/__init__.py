"""Client-side data layer for a browsing and listing marketplace."""

__version__ = "0.1.0"
