"""Inbound messaging-provider event ingestion service."""
