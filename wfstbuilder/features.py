"""The feature records that are written in the transactions.

A feature is a GeoJSON-like record: an identifier, a geometry and a property map.
It can optionally carry its own layer name, namespace prefix, and other settings
that override the defaults given by the caller (see :func:`wfstbuilder.options.resolve`).
"""

from __future__ import annotations

import typing
from collections.abc import Mapping
from dataclasses import dataclass

import orjson

from wfstbuilder.exceptions import TransactionBuildError
from wfstbuilder.geometries import Geometry, parse_geometry

__all__ = (
    "Feature",
    "parse_features",
)

#: A layer can be a plain name, or a ``{"id": name}`` structure.
LayerRef = typing.Union[str, Mapping, None]


@dataclass
class Feature:
    """A single feature to insert, update, replace or delete."""

    #: The identifier, either plain (``5``) or already prefixed with a layer (``roads.5``).
    id: str | int | None = None
    #: The geometry, may be omitted for updates that only change properties.
    geometry: Geometry | None = None
    #: The properties, written in this order.
    properties: dict[str, typing.Any] | None = None

    #: The layer (feature type name) this feature belongs to.
    layer: LayerRef = None
    #: The namespace prefix of the feature type.
    ns: str | None = None
    #: The name of the geometry property in the feature type.
    geometry_name: str | None = None
    srs_name: str | None = None
    srs_dimension: int | str | None = None
    #: Which properties to write, in the listed order.
    whitelist: list[str] | None = None

    def __post_init__(self):
        if self.geometry is not None and not isinstance(self.geometry, Geometry):
            self.geometry = parse_geometry(self.geometry)

    @classmethod
    def from_geojson(cls, data: Mapping) -> Feature:
        """Read a GeoJSON ``Feature`` object.

        Besides the standard GeoJSON members, this also reads the
        ``layer``, ``ns``, ``geometry_name`` (or ``geometryName``), ``srsName``,
        ``srsDimension`` and ``whitelist`` members when they exist.
        """
        geometry = data.get("geometry")
        return cls(
            id=data.get("id"),
            geometry=parse_geometry(geometry) if geometry is not None else None,
            properties=data.get("properties"),
            layer=data.get("layer"),
            ns=data.get("ns"),
            geometry_name=data.get("geometry_name", data.get("geometryName")),
            srs_name=data.get("srsName", data.get("srs_name")),
            srs_dimension=data.get("srsDimension", data.get("srs_dimension")),
            whitelist=data.get("whitelist"),
        )


def parse_features(value) -> list[Feature]:
    """Normalize the input into a list of features.

    This accepts a :class:`Feature`, a GeoJSON ``Feature`` or ``FeatureCollection`` mapping,
    a JSON document (as ``str`` or ``bytes``), or a sequence of these.
    Empty items (``None``) are skipped.
    """
    if value is None:
        return []
    elif isinstance(value, (str, bytes)):
        try:
            value = orjson.loads(value)
        except orjson.JSONDecodeError as e:
            raise TransactionBuildError(f"Invalid GeoJSON document: {e}") from e

    if isinstance(value, Feature):
        return [value]
    elif isinstance(value, Mapping):
        if value.get("type") == "FeatureCollection" or "features" in value:
            return parse_features(list(value.get("features") or ()))
        return [Feature.from_geojson(value)]
    elif isinstance(value, (list, tuple)):
        features = []
        for item in value:
            if item is None:
                continue
            elif isinstance(item, Feature):
                features.append(item)
            elif isinstance(item, Mapping):
                features.extend(parse_features(item))
            else:
                raise TransactionBuildError(f"Expected a GeoJSON feature, got: {item!r}")
        return features
    else:
        raise TransactionBuildError(f"Expected GeoJSON features, got: {value!r}")
