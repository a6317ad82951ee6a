"""Exceptions for building WFS-T transactions.

All errors are raised for invalid input provided by the caller,
hence they all extend from :class:`ValueError`. Nothing is retried
or recovered internally; callers decide whether to abort or skip.

Empty inputs (e.g. inserting zero features) are not an error,
those only log a warning and produce an empty action.
"""

from __future__ import annotations


class TransactionBuildError(ValueError):
    """Raise a ValueError for malformed input.
    This helps to distinguish between internal bugs
    (e.g. unpacking values) and input that can't be encoded.
    """


class UnsupportedGeometryError(TransactionBuildError):
    """The geometry type is not one of the simple feature types that GML supports here."""

    def __init__(self, geometry_type):
        super().__init__(f"Unsupported geometry type: {geometry_type!r}")
        self.geometry_type = geometry_type


class InvalidGeometryError(TransactionBuildError):
    """The coordinates don't have the nesting that the geometry type requires."""


class InvalidActionsError(TransactionBuildError):
    """The actions for a transaction are not strings, nor an insert/update/delete mapping."""


class UndeclaredNamespaceError(TransactionBuildError):
    """An XML namespace prefix is used, but no URI was assigned to it."""

    def __init__(self, prefix: str):
        super().__init__(
            f"Unassigned XML namespace '{prefix}', provide its URI in 'nsAssignments'."
        )
        self.prefix = prefix


class MissingTypeNameError(TransactionBuildError):
    """No typeName is given, and it can't be constructed from the namespace and layer."""


class MissingFeatureIdError(TransactionBuildError):
    """A filter needs to be generated for a feature that has no identifier."""


class InvalidValueError(TransactionBuildError):
    """A property value can't be written, e.g. a NaN number."""


class InvalidCRSError(TransactionBuildError):
    """The srsName could not be parsed as coordinate reference system."""
