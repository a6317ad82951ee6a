"""Coordinate Reference System names, used to detect the axis ordering.

GeoJSON always writes longitude/latitude (x/y), while a CRS like
``urn:ogc:def:crs:EPSG::4326`` expects latitude/longitude. The ``srsName``
can therefore decide in which order the coordinates are written
(see :func:`resolve_coordinate_order`).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import cached_property, lru_cache

import pyproj

from wfstbuilder import conf
from wfstbuilder.exceptions import InvalidCRSError

logger = logging.getLogger(__name__)

__all__ = [
    "CRS",
    "resolve_coordinate_order",
]

CRS_URN_REGEX = re.compile(
    r"^urn:(?P<domain>[a-z]+)"
    r":def:crs:(?P<authority>[a-z]+)"
    r":(?P<version>[0-9]+(\.[0-9]+(\.[0-9]+)?)?)?"
    r":(?P<id>[0-9]+|crs84)"
    r"$",
    re.IGNORECASE,
)

# URL notations for EPSG codes
LEGACY_XML_PREFIX = "http://www.opengis.net/gml/srs/epsg.xml#"
MODERN_URL_PREFIX = "http://www.opengis.net/def/crs/epsg/0/"


@lru_cache(maxsize=20)
def _get_proj_crs(authority: str, code: str) -> pyproj.CRS:
    return pyproj.CRS.from_authority(authority, code)


@dataclass(frozen=True)
class CRS:
    """A parsed ``srsName``, preferably given in the
    `OGC URN format <http://www.opengeospatial.org/ogcUrnPolicy>`_.

    Instances can be passed as ``srs_name`` option too, these are written
    as their URN (or as legacy URL when the legacy notation was parsed).
    """

    #: Either "EPSG" or "OGC".
    authority: str

    #: The code within the authority, e.g. "4326" or "CRS84".
    code: str

    #: The numeric spatial reference ID.
    srid: int

    #: The version of the registry, which is typically empty.
    version: str = field(default="", compare=False)

    #: The notation that was parsed.
    origin: str | None = field(default=None, compare=False)

    #: Whether the notation implies the legacy x/y ordering, regardless of the CRS axes.
    force_xy: bool = False

    @classmethod
    def from_string(cls, value: str | int) -> CRS:
        """Parse the CRS notation. This can be:

        * A URN, e.g. ``urn:ogc:def:crs:EPSG::4326`` or ``urn:ogc:def:crs:OGC::CRS84``.
        * A legacy notation (``EPSG:4326`` or ``http://www.opengis.net/gml/srs/epsg.xml#4326``).
        * The modern URL (``http://www.opengis.net/def/crs/epsg/0/4326``).
        * A numeric SRID.

        :raises InvalidCRSError: when the value can't be parsed.
        """
        if isinstance(value, int) or value.isdigit():
            return cls(authority="EPSG", code=str(int(value)), srid=int(value))
        elif value.lower().startswith("urn:"):
            return cls._from_urn(value)
        else:
            return cls._from_url(value)

    @classmethod
    def _from_urn(cls, urn: str) -> CRS:
        urn_match = CRS_URN_REGEX.match(urn)
        if not urn_match:
            raise InvalidCRSError(f"Unknown CRS URN [{urn}] given: {CRS_URN_REGEX.pattern}")
        elif urn_match.group("domain").lower() not in ("ogc", "opengis"):
            raise InvalidCRSError(f"CRS URN [{urn}] contains unknown domain.")

        authority = urn_match.group("authority").upper()
        code = urn_match.group("id").upper()
        if authority == "EPSG" and code.isdigit():
            srid = int(code)
        elif authority == "OGC" and code in ("CRS84", "84"):
            code = "CRS84"
            srid = 4326  # WGS84 in longitude/latitude ordering
        else:
            raise InvalidCRSError(f"CRS URN [{urn}] contains unknown code [{code}].")

        return cls(
            authority=authority,
            code=code,
            srid=srid,
            version=urn_match.group("version") or "",
            origin=urn,
        )

    @classmethod
    def _from_url(cls, uri: str) -> CRS:
        """Parse the legacy notations, following the GeoServer conventions for the axis ordering.
        See: https://docs.geoserver.org/stable/en/user/services/wfs/axis_order.html
        """
        origin = uri.lower() if "://" in uri else uri.upper()
        if origin.startswith("EPSG:"):
            code = origin[5:]
            force_xy = conf.WFST_FORCE_XY_EPSG_4326 and code == "4326"
        elif origin.startswith(LEGACY_XML_PREFIX):
            code = origin[len(LEGACY_XML_PREFIX) :]
            force_xy = conf.WFST_FORCE_XY_OLD_CRS
        elif origin.startswith(MODERN_URL_PREFIX):
            code = origin[len(MODERN_URL_PREFIX) :]
            force_xy = False
        else:
            raise InvalidCRSError(f"Unknown CRS URI [{uri}] given.")

        if not code.isdigit():
            raise InvalidCRSError(f"CRS URI [{uri}] should contain a numeric SRID value.")

        return cls(
            authority="EPSG", code=code, srid=int(code), origin=origin, force_xy=bool(force_xy)
        )

    @property
    def urn(self) -> str:
        """The OGC URN notation of this CRS."""
        return f"urn:ogc:def:crs:{self.authority}:{self.version}:{self.code}"

    @property
    def legacy(self) -> str:
        """The legacy :samp:`http://www.opengis.net/gml/srs/epsg.xml#{srid}` notation."""
        return f"{LEGACY_XML_PREFIX}{self.srid:d}"

    @cached_property
    def axis_direction(self) -> list[str]:
        """Tell the axis ordering of this coordinate system, e.g. ``['north', 'east']`` for WGS84.
        See: https://wiki.osgeo.org/wiki/Axis_Order_Confusion for a good summary.
        """
        return [axis.direction for axis in _get_proj_crs(self.authority, self.code).axis_info]

    @property
    def is_north_east_order(self) -> bool:
        return self.axis_direction == ["north", "east"]

    def __str__(self):
        return self.legacy if self.force_xy else self.urn


def resolve_coordinate_order(srs_name: CRS | str | None, coordinate_order: bool | None) -> bool:
    """Tell whether GeoJSON coordinates can be written as-is (``True``), or need to be swapped.

    An explicit ``coordinate_order`` always wins. Otherwise, when ``WFST_AXIS_ORDER_FROM_CRS``
    is enabled, the axis ordering of the ``srs_name`` decides. Legacy notations
    (e.g. ``EPSG:4326``) keep the x/y ordering, like GeoServer does.
    The ``WFST_COORDINATE_ORDER`` setting is the fallback.
    """
    if coordinate_order is not None:
        return bool(coordinate_order)

    if conf.WFST_AXIS_ORDER_FROM_CRS and srs_name:
        crs = srs_name if isinstance(srs_name, CRS) else CRS.from_string(str(srs_name))
        logger.debug("Axis ordering of %s is %s", crs, crs.axis_direction)
        return crs.force_xy or not crs.is_north_east_order

    return conf.WFST_COORDINATE_ORDER

