"""
Command to handle uazapi webhook events.

Receives the raw webhook body, classifies the event and drives the ingestion
pipeline: acknowledgements go to the status reconciler; message events are
resolved to an identity, tracked on a conversation, recorded, handed to the
automations and finally relayed to the instance's forwarding URL.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.adapters.uazapi import parse_event
from app.adapters.webhook_relay import relay_event
from app.commands.base_uazapi import BaseUazapiCommand
from app.constants.events import (
    MESSAGE_EVENT_TYPE,
    READ_RECEIPT_SUBTYPE,
    EventKind,
    classify_event_type,
)
from app.models.instance import Instance
from app.schemas.uazapi import UazapiWebhookEvent
from app.services.automation_dispatcher import AutomationDispatcher
from app.services.conversation_tracker import ConversationTracker
from app.services.identity_resolver import IdentityResolutionError, IdentityResolver
from app.services.instance_service import InstanceService
from app.services.media_transfer_service import MediaTransferService
from app.services.message_recorder import MessagePersistenceError, MessageRecorder
from app.services.profile_photo_service import ProfilePhotoService
from app.services.status_reconciler import StatusReconciler

SUCCESS = {"success": True}


def decode_body(raw_body: bytes) -> Any:
    """Decode the raw request body; a batched ``[event]`` is unwrapped."""
    try:
        payload = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=400, detail="Invalid JSON body") from e
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")
    return payload


class UazapiWebhookCommand(BaseUazapiCommand):
    """
    Command to handle uazapi webhook events.
    Returns {"success": True} for processed and deliberately ignored events;
    raises HTTPException for malformed input or unknown instances.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.instance_service = InstanceService(db)
        self.logger = logging.getLogger(__name__)

    def execute(
        self, raw_body: bytes, instance_name: Optional[str] = None
    ) -> dict[str, bool]:
        """
        Execute the webhook: parse, route by event type, process.

        Args:
            raw_body: Request body as received.
            instance_name: Instance from the URL path; falls back to the
                payload's ``instanceName``.

        Raises:
            HTTPException: 400 on invalid body, missing instance name, instance
                without owner or missing chat id; 404 on unknown instance;
                500 when the message cannot be stored.
        """
        payload = decode_body(raw_body)
        try:
            event = parse_event(payload)
        except ValueError as e:
            self.logger.warning("uazapi webhook parse error: %s", e)
            raise HTTPException(status_code=400, detail="Invalid uazapi event") from e

        event_type = event.event_type
        kind = classify_event_type(event_type)
        if kind == EventKind.ACKNOWLEDGEMENT:
            self._handle_acknowledgement(event, event_type)
            return SUCCESS
        if kind == EventKind.IGNORED:
            self.logger.info("Ignoring uazapi event type %s", event_type)
            return SUCCESS

        instance = self._get_instance(instance_name or event.instance_name)
        self._handle_message(event, instance)

        if instance.webhook_url and event_type == MESSAGE_EVENT_TYPE:
            relay_event(instance.webhook_url, payload)
        return SUCCESS

    def _handle_acknowledgement(self, event: UazapiWebhookEvent, event_type: str) -> None:
        subtype = event.type if event.type != event_type else None
        if subtype and subtype != READ_RECEIPT_SUBTYPE:
            self.logger.info("Ignoring %s acknowledgement of type %s", event_type, subtype)
            return
        StatusReconciler(self.db).reconcile(event)

    def _get_instance(self, instance_name: Optional[str]) -> Instance:
        if not instance_name:
            raise HTTPException(status_code=400, detail="Missing instanceName")
        instance = self.instance_service.get_by_name(instance_name)
        if instance is None:
            self.logger.warning("Webhook for unknown instance %s", instance_name)
            raise HTTPException(status_code=404, detail="Instance not found")
        if instance.user_id is None:
            raise HTTPException(status_code=400, detail="Instance has no owner")
        return instance

    def _handle_message(self, event: UazapiWebhookEvent, instance: Instance) -> None:
        adapter = self.get_uazapi_adapter(instance)
        storage = self.get_blob_storage()

        resolver = IdentityResolver(
            self.db, ProfilePhotoService(self.db, adapter, storage)
        )
        try:
            identity = resolver.resolve(event, instance)
        except IdentityResolutionError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        conversation = ConversationTracker(self.db).track(identity, instance)

        recorder = MessageRecorder(self.db, MediaTransferService(adapter, storage))
        try:
            recorded = recorder.record(event, identity, conversation)
        except MessagePersistenceError as e:
            raise HTTPException(status_code=500, detail="Failed to save message") from e

        AutomationDispatcher(self.db).dispatch(recorded)
