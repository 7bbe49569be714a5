"""Logging audit sink — implements AuditSink by writing one structured log line per event."""

from __future__ import annotations

import json
import logging

from caseflow.application.ports.audit_port import AuditSink
from caseflow.domain.entities.assignment_event import AssignmentEvent

logger = logging.getLogger("caseflow.audit")


class LoggingAuditSink(AuditSink):
    async def publish(self, event: AssignmentEvent) -> None:
        logger.info(
            "assignment.%s assignment=%s tenant=%s client=%s caseworker=%s actor=%s details=%s",
            event.kind.value,
            event.assignment_id,
            event.tenant_id,
            event.client_id,
            event.caseworker_id,
            event.actor_id if event.actor_id is not None else "system",
            json.dumps(event.details, sort_keys=True, default=str),
        )
