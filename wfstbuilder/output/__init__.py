"""Rendering the XML output."""

from .gml32 import GML32Encoder, geometry_to_gml, order_coordinates
from .utils import attr_escape, render_attrs, render_tag, tag_escape, value_to_xml_string

__all__ = [
    "GML32Encoder",
    "geometry_to_gml",
    "order_coordinates",
    "attr_escape",
    "render_attrs",
    "render_tag",
    "tag_escape",
    "value_to_xml_string",
]
