"""The options for building transactions, and how they combine with the feature data.

Settings can be given for all features at once (the :class:`TransactionOptions`),
while a feature may also carry its own value. The precedence differs per setting:

* Data that belongs to the feature itself (``properties``, ``geometry``, ``id``, ``layer``)
  is taken from the feature first, the options only fill in what the feature lacks.
* Everything else (``ns``, ``srs_name``, ``srs_dimension``, ``geometry_name``, ``whitelist``)
  is controlled by the caller: the options win, and the feature value is the fallback.
"""

from __future__ import annotations

import dataclasses
import math
import typing
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal as D

import orjson

from wfstbuilder.exceptions import InvalidValueError, MissingTypeNameError
from wfstbuilder.features import Feature, LayerRef
from wfstbuilder.geometries import Geometry

if typing.TYPE_CHECKING:
    from wfstbuilder.crs import CRS

__all__ = (
    "UNSET",
    "TransactionOptions",
    "ResolvedAttributes",
    "as_options",
    "resolve",
    "format_id",
    "format_type_name",
    "iter_properties",
)


class _Unset:
    """Marker for a property that should be referenced without giving it a value."""

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


#: Property value for a ``<wfs:Property>`` that only has a ``<wfs:ValueReference>``.
UNSET = _Unset()

# The camelCase names that callers may use in a dict of options.
OPTION_ALIASES = {
    "srsName": "srs_name",
    "srsDimension": "srs_dimension",
    "geometryName": "geometry_name",
    "typeName": "type_name",
    "nsAssignments": "ns_assignments",
    "schemaLocations": "schema_locations",
    "inputFormat": "input_format",
    "lockId": "lock_id",
    "releaseAction": "release_action",
    "gmlIds": "gml_ids",
    "coordinateOrder": "coordinate_order",
}


@dataclass(frozen=True)
class TransactionOptions:
    """The settings for a single call. All fields are optional, ``None`` means "not given"."""

    #: The namespace prefix of the feature types, e.g. ``app``.
    ns: str | None = None
    #: The layer name (feature type), or a ``{"id": name}`` structure.
    layer: LayerRef = None
    srs_name: CRS | str | None = None
    srs_dimension: int | str | None = None
    #: The name of the geometry property in the feature type.
    geometry_name: str | None = None
    #: Which properties to write, in the listed order.
    whitelist: Sequence[str] | None = None
    #: A ready-made ``<fes:Filter>`` to use instead of filtering by feature id.
    filter: str | None = None
    #: An explicit typeName, instead of deriving it from ``ns`` and ``layer``.
    type_name: str | None = None
    #: The URI's for all namespace prefixes, as ``{prefix: uri}``.
    ns_assignments: Mapping[str, str] | None = None
    #: Additional ``{uri: schema-url}`` entries for the ``xsi:schemaLocation``.
    schema_locations: Mapping[str, str] | None = None
    input_format: str | None = None
    handle: str | None = None
    version: str | None = None
    lock_id: str | None = None
    release_action: str | None = None
    #: Property values to write for all features (bulk update).
    properties: Mapping[str, typing.Any] | None = None
    #: Geometry to write for all features (bulk update).
    geometry: Geometry | Mapping | None = None
    #: The gml:id values of the members of a multi-geometry.
    gml_ids: Sequence[str | int] | None = None
    #: Whether coordinates are written as-is (``True``) or with swapped axes (``False``).
    coordinate_order: bool | None = None

    @classmethod
    def from_dict(cls, values: Mapping[str, typing.Any]) -> TransactionOptions:
        """Construct the options from a mapping, which may use the camelCase names."""
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs = {}
        for key, value in values.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                raise TypeError(f"Unknown transaction option: {key!r}")
            kwargs[name] = value
        return cls(**kwargs)

    def replace(self, **changes) -> TransactionOptions:
        """Return a copy with a few options changed."""
        return dataclasses.replace(self, **changes)


def as_options(options: TransactionOptions | Mapping | None) -> TransactionOptions:
    """Allow passing the options as object, dict or None."""
    if options is None:
        return TransactionOptions()
    elif isinstance(options, TransactionOptions):
        return options
    elif isinstance(options, Mapping):
        return TransactionOptions.from_dict(options)
    else:
        raise TypeError(f"Expected TransactionOptions or dict, got: {options!r}")


@dataclass(frozen=True)
class ResolvedAttributes:
    """The outcome of combining a feature with the options."""

    properties: Mapping[str, typing.Any] = field(default_factory=dict)
    geometry: Geometry | None = None
    id: str | int | None = None
    layer: str = ""
    ns: str = ""
    srs_name: CRS | str = ""
    srs_dimension: int | str = ""
    geometry_name: str = ""
    whitelist: Sequence[str] | None = None


def _layer_name(layer: LayerRef):
    """Allow passing the layer as name, or as an object with an ``id``."""
    if layer is None or isinstance(layer, str):
        return layer
    elif isinstance(layer, Mapping):
        return layer.get("id")
    else:
        return getattr(layer, "id", layer)


def _coalesce(*values, default=""):
    for value in values:
        if value is not None:
            return value
    return default


def resolve(feature: Feature | None, options: TransactionOptions) -> ResolvedAttributes:
    """Combine the feature data with the options.

    For the feature's own data (properties, geometry, id, layer) the feature wins.
    For the other settings, the options win.
    """
    if feature is None:
        feature = Feature()

    geometry = _coalesce(feature.geometry, options.geometry, default=None)
    if geometry is not None and not isinstance(geometry, Geometry):
        geometry = Geometry.from_geojson(geometry)

    return ResolvedAttributes(
        # Feature first
        properties=_coalesce(feature.properties, options.properties, default={}),
        geometry=geometry,
        id=feature.id,
        layer=_coalesce(_layer_name(feature.layer), _layer_name(options.layer)),
        # Options first
        ns=_coalesce(options.ns, feature.ns),
        srs_name=_coalesce(options.srs_name, feature.srs_name),
        srs_dimension=_coalesce(options.srs_dimension, feature.srs_dimension),
        geometry_name=_coalesce(options.geometry_name, feature.geometry_name),
        whitelist=_coalesce(options.whitelist, feature.whitelist, default=None),
    )


def format_id(layer: str, feature_id: str | int) -> str:
    """Construct the ``layer.id`` notation, unless the id already has it."""
    feature_id = str(feature_id)
    return feature_id if "." in feature_id else f"{layer}.{feature_id}"


def format_type_name(ns: str, layer: str, type_name: str | None = None) -> str:
    """Return the typeName, or construct it as ``ns:layerType``.

    :raises MissingTypeNameError: when there is no typeName, and no namespace/layer to build one.
    """
    if type_name:
        return type_name
    elif not (ns and layer):
        details = orjson.dumps({"typeName": type_name, "ns": ns, "layer": layer}).decode()
        raise MissingTypeNameError(f"No typeName possible: {details}")
    return f"{ns}:{layer}Type"


def _is_nan(value) -> bool:
    if isinstance(value, float):
        return math.isnan(value)
    elif isinstance(value, D):
        return value.is_nan()
    return False


def iter_properties(
    whitelist: Sequence[str] | None, properties: Mapping[str, typing.Any]
) -> Iterator[tuple[str, typing.Any]]:
    """Iterate over the properties, in the whitelist order when one is given.

    Names in the whitelist that don't exist in the properties are skipped.

    :raises InvalidValueError: when a value is NaN, which can't be written as number.
    """
    for name in whitelist if whitelist is not None else properties:
        try:
            value = properties[name]
        except KeyError:
            continue

        if _is_nan(value):
            raise InvalidValueError(f"NaN is not allowed, found in property '{name}'.")
        yield name, value
