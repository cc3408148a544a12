"""Presentation layer — HTTP API."""
