"""Build GML 3.2 geometries and WFS-T 2.0 transactions from GeoJSON features."""

from .actions import delete, insert, replace, translate_features, update
from .features import Feature, parse_features
from .options import UNSET, TransactionOptions
from .output.gml32 import geometry_to_gml, order_coordinates
from .transaction import schema_locations, transaction

__version__ = "1.0.0"

__all__ = [
    "UNSET",
    "Feature",
    "TransactionOptions",
    "delete",
    "geometry_to_gml",
    "insert",
    "order_coordinates",
    "parse_features",
    "replace",
    "schema_locations",
    "transaction",
    "translate_features",
    "update",
]
