"""Valuebox error hierarchy.

All valuebox-specific errors inherit from ValueBoxError for easy catching.
"""


class ValueBoxError(Exception):
    """Base error for all valuebox operations."""


class ConfigError(ValueBoxError):
    """Invalid or missing configuration."""


class MalformedRecordError(ValueBoxError):
    """A render record is missing a required field or has a wrong-typed one."""


class DuplicateIdentifierError(ValueBoxError):
    """An output identifier was claimed twice on the same page."""


class MissingSlotError(ValueBoxError):
    """A fragment has no placeholder for a slot the record needs."""


class ResourceError(ValueBoxError):
    """A resource descriptor could not be materialized."""
