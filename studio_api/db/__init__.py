"""Relational persistence: table models and async engine helpers."""
