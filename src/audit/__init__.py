"""Audit logging package."""

from src.audit.logger import AuditLogger, get_logger

__all__ = ["AuditLogger", "get_logger"]
