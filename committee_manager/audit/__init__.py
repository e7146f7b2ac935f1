"""Audit logging package."""

from committee_manager.audit.logger import AUDIT_COLLECTION, AuditLogger, get_logger

__all__ = ["AUDIT_COLLECTION", "AuditLogger", "get_logger"]
