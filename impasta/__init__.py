"""Impasta: voting and elimination engine for a social deduction party game."""
