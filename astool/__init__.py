"""Bulk get, delete and scan for Aerospike records."""

__version__ = "0.1.0"
