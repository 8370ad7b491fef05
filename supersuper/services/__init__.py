"""Pantry services."""
