"""Shared building blocks: error taxonomy and retry/backoff."""
