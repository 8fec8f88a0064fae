"""Adapters binding the application ports to PostgreSQL and HTTP."""
