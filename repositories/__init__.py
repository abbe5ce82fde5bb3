"""Persistence: lead store, query engine, user directory and backend selection."""
