"""Audit log and filesystem services."""

from .file_service import FileService
from .audit_log import AuditLog, MemoryAuditSink, default_log_path

__all__ = ["FileService", "AuditLog", "MemoryAuditSink", "default_log_path"]
