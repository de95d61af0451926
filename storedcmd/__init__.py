"""Stored command processing: ATS and RTS execution, request routing, housekeeping and table management."""

__version__ = "0.1.0"

__all__ = ["dispatch", "executor", "housekeeping", "model", "tables"]