"""Enumerations and fixed vocabularies."""
