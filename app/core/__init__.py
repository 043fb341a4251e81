"""Core value types shared across services."""
