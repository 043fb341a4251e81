"""Webhook command handlers."""

from app.commands.base_uazapi import BaseUazapiCommand
from app.commands.webhooks.uazapi_command import UazapiWebhookCommand

__all__ = ["BaseUazapiCommand", "UazapiWebhookCommand"]
