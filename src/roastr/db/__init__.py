"""Database helpers for the SQL-backed data store."""
