"""Roster — a minimal user list web application backed by SQLite."""
