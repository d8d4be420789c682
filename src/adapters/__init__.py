"""Adapters binding the core to the Signal Desktop store and SQLite exports."""
