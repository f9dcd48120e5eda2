"""Shared helpers: errors, logging and HTTP access."""
