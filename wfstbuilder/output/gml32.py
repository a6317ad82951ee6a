"""Output rendering of geometries in GML 3.2 format.

The GML is written as string directly, which is much faster than building an element tree.
Each geometry type has a render method, registered with :func:`register_geometry_type`.
Multi-geometries render their members with the same methods.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from io import StringIO

from wfstbuilder.crs import CRS, resolve_coordinate_order
from wfstbuilder.exceptions import UnsupportedGeometryError
from wfstbuilder.geometries import (
    Geometry,
    GeometryCollection,
    LinearRing,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    Position,
    parse_geometry,
)

from .utils import render_attrs

GML_RENDER_FUNCTIONS = {}

__all__ = (
    "GML32Encoder",
    "geometry_to_gml",
    "order_coordinates",
)


def register_geometry_type(geometry_type: type[Geometry]):
    def _inc(func):
        GML_RENDER_FUNCTIONS[geometry_type] = func
        return func

    return _inc


def order_coordinates(coords: Position, coordinate_order: bool) -> Sequence:
    """Reorder a GeoJSON position (easting, northing[, elevation]).

    When ``coordinate_order`` is true, the position is kept as-is.
    Otherwise, the first two axes are swapped (e.g. into latitude/longitude).
    """
    if coordinate_order:
        return coords
    return [coords[1], coords[0], *coords[2:]]


class GML32Encoder:
    """Render geometries as GML 3.2 fragments.

    The settings are given once, so they are passed to all members of a multi-geometry.
    """

    def __init__(
        self,
        srs_name: CRS | str | None = None,
        srs_dimension: int | str | None = None,
        gml_ids: Sequence[str | int] | None = None,
        coordinate_order: bool | None = None,
    ):
        self.srs_name = srs_name
        self.srs_dimension = srs_dimension
        self.gml_ids = gml_ids or ()
        self.coordinate_order = resolve_coordinate_order(srs_name, coordinate_order)

    def render(self, geometry: Geometry | Mapping, gml_id="") -> str:
        """Render any geometry type, GeoJSON mappings are accepted too."""
        if not isinstance(geometry, Geometry):
            geometry = parse_geometry(geometry)

        try:
            # Avoid isinstance checks, do a direct lookup
            method = GML_RENDER_FUNCTIONS[geometry.__class__]
        except KeyError:
            raise UnsupportedGeometryError(
                geometry.geojson_type or geometry.__class__.__name__
            ) from None
        return method(self, geometry, gml_id)

    def _attrs(self, gml_id) -> str:
        return render_attrs({"srsName": self.srs_name, "gml:id": gml_id})

    def _pos_list(self, positions: Sequence[Position]) -> str:
        order = self.coordinate_order
        return " ".join(
            " ".join(map(str, order_coordinates(position, order))) for position in positions
        )

    @register_geometry_type(Point)
    def render_gml_point(self, value: Point, gml_id="") -> str:
        coords = " ".join(map(str, order_coordinates(value.coordinates, self.coordinate_order)))
        return (
            f"<gml:Point{self._attrs(gml_id)}>"
            f"<gml:pos{render_attrs({'srsDimension': self.srs_dimension})}>{coords}</gml:pos>"
            "</gml:Point>"
        )

    @register_geometry_type(LineString)
    def render_gml_line_string(self, value: LineString, gml_id="") -> str:
        return (
            f"<gml:LineString{self._attrs(gml_id)}>"
            f"<gml:posList{render_attrs({'srsDimension': self.srs_dimension})}>"
            f"{self._pos_list(value.coordinates)}"
            "</gml:posList>"
            "</gml:LineString>"
        )

    @register_geometry_type(LinearRing)
    def render_gml_linear_ring(self, value: LinearRing, gml_id="", srs_name=None) -> str:
        # The rings of a polygon don't repeat the srsName.
        if srs_name is None:
            srs_name = self.srs_name
        return (
            f"<gml:LinearRing{render_attrs({'gml:id': gml_id, 'srsName': srs_name})}>"
            f"<gml:posList{render_attrs({'srsDimension': self.srs_dimension})}>"
            f"{self._pos_list(value.coordinates)}"
            "</gml:posList>"
            "</gml:LinearRing>"
        )

    @register_geometry_type(Polygon)
    def render_gml_polygon(self, value: Polygon, gml_id="") -> str:
        # The winding order is written as given, the first ring is the exterior.
        rings = [LinearRing(ring) for ring in value.coordinates]
        buf = StringIO()
        buf.write(f"<gml:Polygon{self._attrs(gml_id)}>")
        if rings:
            buf.write("<gml:exterior>")
            buf.write(self.render_gml_linear_ring(rings[0], srs_name=""))
            buf.write("</gml:exterior>")
        for ring in rings[1:]:
            buf.write("<gml:interior>")
            buf.write(self.render_gml_linear_ring(ring, srs_name=""))
            buf.write("</gml:interior>")
        buf.write("</gml:Polygon>")
        return buf.getvalue()

    @register_geometry_type(MultiPoint)
    def render_gml_multi_point(self, value: MultiPoint, gml_id="") -> str:
        members = [Point(coords) for coords in value.coordinates]
        return self._render_multi("MultiPoint", "pointMembers", members, gml_id)

    @register_geometry_type(MultiLineString)
    def render_gml_multi_line_string(self, value: MultiLineString, gml_id="") -> str:
        members = [LineString(coords) for coords in value.coordinates]
        return self._render_multi("MultiCurve", "curveMembers", members, gml_id)

    @register_geometry_type(MultiPolygon)
    def render_gml_multi_polygon(self, value: MultiPolygon, gml_id="") -> str:
        members = [Polygon(coords) for coords in value.coordinates]
        return self._render_multi("MultiSurface", "surfaceMembers", members, gml_id)

    @register_geometry_type(GeometryCollection)
    def render_gml_multi_geometry(self, value: GeometryCollection, gml_id="") -> str:
        return self._render_multi("MultiGeometry", "geometryMembers", value.geometries, gml_id)

    def _render_multi(self, name: str, member_name: str, members: list[Geometry], gml_id) -> str:
        buf = StringIO()
        buf.write(f"<gml:{name}{self._attrs(gml_id)}><gml:{member_name}>")
        for i, member in enumerate(members):
            buf.write(self.render(member, self._get_member_id(member, i)))
        buf.write(f"</gml:{member_name}></gml:{name}>")
        return buf.getvalue()

    def _get_member_id(self, member: Geometry, index: int):
        """The member gml:id is its own id, else the positional entry of 'gml_ids'."""
        if member.id:
            return member.id
        elif index < len(self.gml_ids):
            return self.gml_ids[index]
        else:
            return ""


def geometry_to_gml(
    geometry: Geometry | Mapping,
    gml_id="",
    *,
    srs_name: CRS | str | None = None,
    srs_dimension: int | str | None = None,
    gml_ids: Sequence[str | int] | None = None,
    coordinate_order: bool | None = None,
) -> str:
    """Translate any GeoJSON geometry into GML 3.2.

    :param geometry: The geometry object, or a GeoJSON mapping.
    :param gml_id: The ``gml:id`` of the geometry (omitted when empty).
    :param srs_name: The ``srsName`` attribute (omitted when empty).
    :param srs_dimension: The ``srsDimension`` of the positions, i.e. 2 or 3.
    :param gml_ids: The gml:id values for the members of a multi-geometry.
    :param coordinate_order: Whether to keep the GeoJSON axis order, see
        :func:`~wfstbuilder.crs.resolve_coordinate_order` for the default.
    :raises UnsupportedGeometryError: for an unknown geometry type.
    """
    encoder = GML32Encoder(
        srs_name=srs_name,
        srs_dimension=srs_dimension,
        gml_ids=gml_ids,
        coordinate_order=coordinate_order,
    )
    return encoder.render(geometry, gml_id)
