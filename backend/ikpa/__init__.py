"""Ikpa scoring backend."""
