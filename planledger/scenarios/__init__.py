"""Scenario lifecycle and rollover."""
