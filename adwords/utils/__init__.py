"""Utility helpers shared across the adwords package."""
