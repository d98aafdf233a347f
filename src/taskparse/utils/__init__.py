"""Shared helpers for taskparse."""
