"""
Audit module initialization
"""

from .logger import AuditLogger, MemoryAuditLogger, FileAuditLogger, create_audit_logger

__all__ = [
    "AuditLogger",
    "MemoryAuditLogger",
    "FileAuditLogger",
    "create_audit_logger",
]
