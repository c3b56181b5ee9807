"""Storefront catalog query engine and persisted cart."""

__version__ = "1.0.0"
