"""The geometry data types that can be written as GML.

These cover what GeoJSON can store: the simple feature types.
Coverages, topology or curve interpolations are not part of this.

Each type is a small frozen dataclass holding the GeoJSON coordinates.
The nesting depth of the coordinates is fixed per type, and checked at construction.
"""

from __future__ import annotations

import typing
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal as D

from wfstbuilder.exceptions import InvalidGeometryError, UnsupportedGeometryError

__all__ = [
    "Geometry",
    "Point",
    "LineString",
    "LinearRing",
    "Polygon",
    "MultiPoint",
    "MultiLineString",
    "MultiPolygon",
    "GeometryCollection",
    "GEOMETRY_TYPES",
    "parse_geometry",
]

Number = typing.Union[int, float, D]
Position = Sequence[Number]


@dataclass(frozen=True)
class Geometry:
    """Base class for all geometry types."""

    #: The GeoJSON "type" value.
    geojson_type: typing.ClassVar[str] = ""

    #: How many sequences wrap the numbers (e.g. 1 for a Point, 2 for a LineString).
    depth: typing.ClassVar[int] = 0

    #: Optional gml:id, used for the members of a multi-geometry.
    id: str | int | None = field(default=None, kw_only=True)

    @classmethod
    def from_geojson(cls, data) -> Geometry:
        """Construct the geometry from a GeoJSON mapping (see :func:`parse_geometry`)."""
        geometry = parse_geometry(data)
        if cls is not Geometry and not isinstance(geometry, cls):
            raise InvalidGeometryError(
                f"Expected a {cls.geojson_type} geometry, not {geometry.geojson_type}."
            )
        return geometry

    def _check_coordinates(self, coordinates):
        if not _is_nested_positions(coordinates, self.depth):
            raise InvalidGeometryError(
                f"Coordinates of {self.geojson_type} should be nested {self.depth} levels deep,"
                f" with 2 or 3 numbers per position, got: {coordinates!r}"
            )


def _is_number(value) -> bool:
    return isinstance(value, (int, float, D)) and not isinstance(value, bool)


def _is_nested_positions(value, depth: int) -> bool:
    """Tell whether all positions are found at the given depth, each having 2 or 3 numbers."""
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return False
    elif depth == 1:
        return len(value) in (2, 3) and all(_is_number(number) for number in value)
    else:
        # Empty sequences are allowed, these are written as empty geometries.
        return all(_is_nested_positions(item, depth - 1) for item in value)


@dataclass(frozen=True)
class Point(Geometry):
    geojson_type = "Point"
    depth = 1

    coordinates: Position

    def __post_init__(self):
        self._check_coordinates(self.coordinates)


@dataclass(frozen=True)
class LineString(Geometry):
    geojson_type = "LineString"
    depth = 2

    coordinates: Sequence[Position]

    def __post_init__(self):
        self._check_coordinates(self.coordinates)


@dataclass(frozen=True)
class LinearRing(LineString):
    """A closed line, used for the rings of a polygon.
    GeoJSON doesn't have this type, but it can be written standalone too.
    """

    geojson_type = "LinearRing"


@dataclass(frozen=True)
class Polygon(Geometry):
    """A polygon; the first ring is the exterior, the others are holes."""

    geojson_type = "Polygon"
    depth = 3

    coordinates: Sequence[Sequence[Position]]

    def __post_init__(self):
        self._check_coordinates(self.coordinates)


@dataclass(frozen=True)
class MultiPoint(Geometry):
    geojson_type = "MultiPoint"
    depth = 2

    coordinates: Sequence[Position]

    def __post_init__(self):
        self._check_coordinates(self.coordinates)


@dataclass(frozen=True)
class MultiLineString(Geometry):
    geojson_type = "MultiLineString"
    depth = 3

    coordinates: Sequence[Sequence[Position]]

    def __post_init__(self):
        self._check_coordinates(self.coordinates)


@dataclass(frozen=True)
class MultiPolygon(Geometry):
    geojson_type = "MultiPolygon"
    depth = 4

    coordinates: Sequence[Sequence[Sequence[Position]]]

    def __post_init__(self):
        self._check_coordinates(self.coordinates)


@dataclass(frozen=True)
class GeometryCollection(Geometry):
    """A collection of mixed geometries. Each member keeps its own type."""

    geojson_type = "GeometryCollection"

    geometries: Sequence[Geometry]

    def __post_init__(self):
        for member in self.geometries:
            if not isinstance(member, Geometry):
                raise InvalidGeometryError(
                    f"GeometryCollection members should be geometries, got: {member!r}"
                )


#: All supported types, by their GeoJSON name.
GEOMETRY_TYPES: dict[str, type[Geometry]] = {
    geometry_class.geojson_type: geometry_class
    for geometry_class in (
        Point,
        LineString,
        LinearRing,
        Polygon,
        MultiPoint,
        MultiLineString,
        MultiPolygon,
        GeometryCollection,
    )
}


def parse_geometry(data) -> Geometry:
    """Translate a GeoJSON geometry into its typed object.

    This accepts a mapping like ``{"type": "Point", "coordinates": [1, 2]}``,
    objects that implement the ``__geo_interface__`` protocol (e.g. Shapely),
    and existing :class:`Geometry` instances.

    :raises UnsupportedGeometryError: when the ``type`` is not one of the supported types.
    :raises InvalidGeometryError: when the coordinates don't match the type.
    """
    if isinstance(data, Geometry):
        return data
    elif hasattr(data, "__geo_interface__"):
        data = data.__geo_interface__

    if not isinstance(data, Mapping):
        raise InvalidGeometryError(f"Expected a GeoJSON geometry object, got: {data!r}")

    geojson_type = data.get("type")
    try:
        geometry_class = GEOMETRY_TYPES[geojson_type]
    except (KeyError, TypeError):
        raise UnsupportedGeometryError(geojson_type) from None

    if geometry_class is GeometryCollection:
        members = data.get("geometries")
        if members is None:
            raise InvalidGeometryError("GeometryCollection misses the 'geometries' member.")
        return GeometryCollection(
            [parse_geometry(member) for member in members], id=data.get("id")
        )

    try:
        coordinates = data["coordinates"]
    except KeyError:
        raise InvalidGeometryError(f"{geojson_type} misses the 'coordinates' member.") from None

    return geometry_class(coordinates, id=data.get("id"))
