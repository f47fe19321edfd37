from __future__ import annotations


class ProjectionError(Exception):
    """Base error for the projection engine."""


class ConfigurationError(ProjectionError):
    """Invalid model configuration or missing macro parameters.

    Raised before any projection work starts; never defaulted silently.
    """


class CatalogError(ProjectionError):
    """Catalog snapshot violates its integrity rules."""
