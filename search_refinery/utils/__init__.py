"""Shared utilities: logging and the error hierarchy."""
