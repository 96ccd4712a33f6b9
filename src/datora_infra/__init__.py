"""
datora-infra - Shared infrastructure helpers for Datora services.

Provides SQL Server table/column naming helpers and a form-data HTTP client
that mirrors request/response pairs into a search index for auditing.
"""

__version__ = "0.1.0"
