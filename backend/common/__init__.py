"""Shared helpers used across the marketplace apps."""
