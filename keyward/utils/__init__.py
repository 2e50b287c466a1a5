"""Helpers for randomness, hashing and datetimes."""
