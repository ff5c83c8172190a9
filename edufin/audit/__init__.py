"""Audit logging package."""

from edufin.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
