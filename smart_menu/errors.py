from __future__ import annotations


class SmartMenuError(Exception):
    """Base class for errors raised inside the dish-selection pipeline."""


class CatalogError(SmartMenuError):
    """A single catalog sub-fetch failed (HTTP error, transport error, timeout, bad JSON)."""


class AnnotationError(SmartMenuError):
    """The text-annotation service returned nothing usable."""


class AnalysisError(SmartMenuError):
    """A dish record is structurally unusable for analysis."""
