"""Cassandra/ScyllaDB-backed user store."""

__version__ = "0.1.0"
