"""Audit trail for account and Google events.

Entries go to the ``audit`` logger with the structured record attached as
``audit_data``, which the JSON formatter nests under an ``audit`` key.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

audit_logger = logging.getLogger("audit")


class AuditAction(str, Enum):
    REGISTER = "register"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    GOOGLE_CONNECTED = "google_connected"
    GOOGLE_CONNECT_FAILED = "google_connect_failed"
    GOOGLE_DISCONNECTED = "google_disconnected"
    DOC_EXPORTED = "doc_exported"


@dataclass
class AuditEntry:
    action: AuditAction
    user_id: str | None = None
    email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    details: dict = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_record(self) -> dict:
        record = {
            "type": "audit",
            "action": self.action.value,
            "ts": self.timestamp,
            "user_id": self.user_id,
            "email": self.email,
            "ip": self.ip_address,
            "ua": self.user_agent,
        }
        if self.details:
            record["details"] = self.details
        return record


def log_audit(entry: AuditEntry) -> None:
    audit_logger.info(
        "AUDIT %s user=%s ip=%s",
        entry.action.value, entry.user_id or "anon", entry.ip_address or "unknown",
        extra={"audit_data": entry.to_record()},
    )


def audit_register(user_id: str, email: str, ip: str) -> None:
    log_audit(AuditEntry(AuditAction.REGISTER, user_id=user_id, email=email, ip_address=ip))


def audit_login_success(user_id: str, email: str, ip: str, ua: str) -> None:
    log_audit(AuditEntry(AuditAction.LOGIN_SUCCESS, user_id=user_id, email=email, ip_address=ip, user_agent=ua))


def audit_login_failed(email: str, ip: str, ua: str, reason: str = "invalid_credentials") -> None:
    log_audit(AuditEntry(
        AuditAction.LOGIN_FAILED, email=email, ip_address=ip, user_agent=ua,
        details={"reason": reason},
    ))


def audit_google_event(action: AuditAction, user_id: str | None, google_email: str | None = None,
                       reason: str | None = None) -> None:
    """Connect, connect failure, or disconnect of a Google account."""
    details = {key: value for key, value in (("google_email", google_email), ("reason", reason)) if value}
    log_audit(AuditEntry(action, user_id=user_id, details=details))


def audit_doc_exported(user_id: str, doc_id: str, google_doc_id: str) -> None:
    log_audit(AuditEntry(
        AuditAction.DOC_EXPORTED, user_id=user_id,
        details={"doc_id": doc_id, "google_doc_id": google_doc_id},
    ))
