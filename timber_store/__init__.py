"""Storefront and back-office for a timber merchant."""

__version__ = "0.1.0"
