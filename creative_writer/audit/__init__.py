"""Audit trail of AI generation requests."""

from .logger import AIRequestLogger, AuditLogger
from .models import AIRequestLog, AIRequestStatus

__all__ = ["AIRequestLog", "AIRequestLogger", "AIRequestStatus", "AuditLogger"]
