"""Reference data: account items and services."""
