"""Shared helpers for the Graph mail client."""
