"""Builders and doubles shared by the marketplace test modules."""
