"""Integration base classes."""
