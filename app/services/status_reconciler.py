"""Delivery/read acknowledgements -> message status."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.constants.messages import MessageStatus, status_for_ack_state
from app.models.message import Message
from app.schemas.uazapi import UazapiWebhookEvent

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    status: MessageStatus
    updated: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class StatusReconciler:
    def __init__(self, db: Session) -> None:
        self.db = db

    def reconcile(self, event: UazapiWebhookEvent) -> ReconcileResult:
        """Apply an acknowledgement event. Never raises."""
        return self.apply(event.acknowledged_ids, status_for_ack_state(event.state))

    def apply(
        self, external_ids: Iterable[str], status: MessageStatus
    ) -> ReconcileResult:
        """Set ``status`` on every message with each external id, one transaction per id."""
        result = ReconcileResult(status=status)
        for external_id in external_ids:
            if not external_id:
                continue
            try:
                updated = (
                    self.db.query(Message)
                    .filter(Message.external_id == external_id)
                    .update({Message.status: status.value}, synchronize_session=False)
                )
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.warning("Status update failed for message %s: %s", external_id, e)
                result.failed.append(external_id)
                continue
            if updated:
                result.updated.append(external_id)
            else:
                logger.info("Acknowledged message %s not found", external_id)
                result.missing.append(external_id)

        logger.info(
            "Reconciled %s: updated=%d missing=%d failed=%d",
            status.value,
            len(result.updated),
            len(result.missing),
            len(result.failed),
        )
        return result
