"""Persistence backends for habits."""
