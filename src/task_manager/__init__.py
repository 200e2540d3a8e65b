"""Single-user task tracker backed by a hosted auth + database service."""

__version__ = "0.1.0"
