"""Shared utilities: console output, structured logging, time helpers."""
