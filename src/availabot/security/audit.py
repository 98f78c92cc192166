"""
Audit log for the OAuth handshake.
Created: 2026-10-18

Append-only JSONL record of every flow start, completion and rejection, so a
CSRF mismatch leaves a trace even when nothing is reported back to whoever
triggered it.
"""

import json
import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from availabot.config import get_config_dir

logger = logging.getLogger("audit")


class AuditSeverity(str, Enum):
    INFO = "info"  # Normal operation (flow started, credential stored)
    WARNING = "warning"  # Failed but harmless (unknown flow, bad state)
    ALERT = "alert"  # Security violation (CSRF mismatch)


@dataclass
class AuditEvent:
    """A single audit log entry."""

    id: str
    timestamp: str
    severity: AuditSeverity
    actor: str  # User the flow belongs to
    action: str  # e.g. "auth_flow_start", "auth_flow_complete"
    status: str  # "success", "reject", "error"
    context: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        severity: AuditSeverity,
        actor: str,
        action: str,
        status: str,
        **context: Any,
    ) -> "AuditEvent":
        return cls(
            id=str(uuid.uuid4()),
            timestamp=datetime.now(tz=UTC).isoformat(),
            severity=severity,
            actor=actor,
            action=action,
            status=status,
            context=context,
        )


class AuditLogger:
    """
    Append-only audit logger.
    Writes to ~/.availabot/audit.jsonl unless given another path.
    """

    def __init__(self, log_path: Path | None = None):
        self.log_path = log_path or get_config_dir() / "audit.jsonl"

    def log(self, event: AuditEvent) -> None:
        """Write an event to the audit log."""
        try:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(asdict(event)) + "\n")
        except OSError as e:
            logger.critical("FAILED TO WRITE AUDIT LOG: %s | Event: %s", e, event)

    def log_auth_event(
        self,
        user_id: str,
        action: str,
        status: str,
        severity: AuditSeverity = AuditSeverity.INFO,
        **context: Any,
    ) -> str:
        """Helper to log one step of an auth flow. Returns the event ID."""
        event = AuditEvent.create(
            severity=severity,
            actor=user_id,
            action=action,
            status=status,
            **context,
        )
        self.log(event)
        return event.id


# Singleton
_audit_logger: AuditLogger | None = None


def get_audit_logger() -> AuditLogger:
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger
