"""Shared infrastructure: logging, filesystem locations and runtime settings."""
