"""Filter Encoding 2.0 (FES) output.

Update, Delete and Replace actions select their target features with a ``<fes:Filter>``.
When the caller doesn't provide one, the filter is generated from the feature identifiers::

    <fes:Filter>
      <fes:ResourceId rid="roads.5"/>
      <fes:ResourceId rid="roads.6"/>
    </fes:Filter>

Multiple ``<fes:ResourceId>`` elements form a union, no ``<fes:Or>`` is needed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from wfstbuilder.exceptions import MissingFeatureIdError
from wfstbuilder.features import Feature
from wfstbuilder.options import TransactionOptions, format_id, resolve
from wfstbuilder.output.utils import render_tag

__all__ = (
    "ResourceId",
    "ensure_filter",
)


@dataclass(frozen=True)
class ResourceId:
    """The ``<fes:ResourceId>`` element, selecting a feature by its identifier."""

    #: The "resource identifier", typically in the ``typename.id`` notation.
    rid: str

    @classmethod
    def from_feature(cls, feature: Feature, options: TransactionOptions) -> ResourceId:
        layer = resolve(feature, options).layer
        if feature.id is None or feature.id == "":
            raise MissingFeatureIdError(
                f"Feature in layer '{layer}' has no id, a filter can't be generated for it."
            )
        return cls(rid=format_id(layer, feature.id))

    def as_xml(self) -> str:
        return render_tag("fes", "ResourceId", {"rid": self.rid}, inner=None)


def ensure_filter(
    explicit_filter: str | None, features: Iterable[Feature], options: TransactionOptions
) -> str:
    """Return the given filter, or build one from the feature identifiers.

    A non-empty ``explicit_filter`` is returned unchanged, it's trusted as ``<fes:Filter>`` XML.
    """
    if explicit_filter:
        return explicit_filter

    resource_ids = "".join(
        ResourceId.from_feature(feature, options).as_xml() for feature in features
    )
    return render_tag("fes", "Filter", inner=resource_ids)
