"""Request-level commands orchestrating the services."""
