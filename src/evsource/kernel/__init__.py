"""Kernel – errors, identifiers, time and DDD building blocks (no I/O)."""
