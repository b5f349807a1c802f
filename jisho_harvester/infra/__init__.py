"""Infra layer utilities (crash-safe storage)."""

from .storage import atomic_write, escaped_name, list_records

__all__ = ["atomic_write", "escaped_name", "list_records"]
