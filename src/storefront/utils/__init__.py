"""Shared infrastructure helpers: logging and database schema management."""
