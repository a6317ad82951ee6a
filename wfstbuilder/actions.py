"""The WFS-T actions: Insert, Update, Delete and Replace.

Each function returns one action element as XML string, which can be combined
into a ``<wfs:Transaction>`` by :func:`wfstbuilder.transaction.transaction`.

The features can be given as :class:`~wfstbuilder.features.Feature` objects,
GeoJSON mappings (a single Feature or a FeatureCollection), or JSON text.
The options can be given as :class:`~wfstbuilder.options.TransactionOptions` or dict.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from io import StringIO

from wfstbuilder.exceptions import MissingTypeNameError
from wfstbuilder.features import Feature, parse_features
from wfstbuilder.fes20 import ensure_filter
from wfstbuilder.options import (
    UNSET,
    TransactionOptions,
    as_options,
    format_id,
    format_type_name,
    iter_properties,
    resolve,
)
from wfstbuilder.output.gml32 import geometry_to_gml
from wfstbuilder.output.utils import render_tag, tag_escape, value_to_xml_string

logger = logging.getLogger(__name__)

__all__ = (
    "insert",
    "update",
    "delete",
    "replace",
    "translate_features",
)


def translate_features(features: list[Feature], options: TransactionOptions) -> str:
    """Write the features as their feature type elements, e.g.::

        <app:roads gml:id="roads.5">
          <app:geom><gml:LineString>...</gml:LineString></app:geom>
          <app:name>Main street</app:name>
        </app:roads>

    The geometry is only written when a geometry property name is known.
    Properties without value (``None``) are left out.
    """
    buf = StringIO()
    for feature in features:
        attrs = resolve(feature, options)
        if not attrs.layer:
            raise MissingTypeNameError(
                f"No layer given for feature {feature.id!r}, its element can't be named."
            )

        fields = StringIO()
        if attrs.geometry_name and attrs.geometry is not None:
            gml = geometry_to_gml(
                attrs.geometry,
                srs_name=attrs.srs_name,
                srs_dimension=attrs.srs_dimension,
                gml_ids=options.gml_ids,
                coordinate_order=options.coordinate_order,
            )
            fields.write(render_tag(attrs.ns, attrs.geometry_name, inner=gml))

        for name, value in iter_properties(attrs.whitelist, attrs.properties):
            if value is None or value is UNSET:
                continue
            fields.write(render_tag(attrs.ns, name, inner=value_to_xml_string(value)))

        gml_id = format_id(attrs.layer, attrs.id) if attrs.id is not None else None
        buf.write(render_tag(attrs.ns, attrs.layer, {"gml:id": gml_id}, fields.getvalue()))

    return buf.getvalue()


def insert(features, options: TransactionOptions | Mapping | None = None) -> str:
    """Create a ``<wfs:Insert>`` action for the features.

    When there are no features, a warning is logged and an empty string is returned.
    """
    options = as_options(options)
    features = parse_features(features)
    if not features:
        logger.warning("No features supplied to insert.")
        return ""

    return render_tag(
        "wfs",
        "Insert",
        {
            "inputFormat": options.input_format,
            "srsName": options.srs_name,
            "handle": options.handle,
        },
        translate_features(features, options),
    )


def _property_xml(name: str, value) -> str:
    """Write a ``<wfs:Property>`` with the ``<wfs:ValueReference>``/``<wfs:Value>`` pair.

    The ``value`` is expected to be XML already.
    A ``None`` value writes ``xsi:nil``, while :data:`UNSET` omits the ``<wfs:Value>``.
    """
    if value is None:
        value_xml = render_tag("wfs", "Value", {"xsi:nil": True}, inner=None)
    elif value is UNSET:
        value_xml = ""
    else:
        value_xml = render_tag("wfs", "Value", inner=value)

    value_reference = render_tag("wfs", "ValueReference", inner=tag_escape(name))
    return render_tag("wfs", "Property", inner=f"{value_reference}{value_xml}")


def _update_bulk(features: list[Feature], options: TransactionOptions) -> str:
    """Write a single ``<wfs:Update>`` that applies ``options.properties`` to all features."""
    first = resolve(features[0] if features else None, options)
    type_name = format_type_name(first.ns, first.layer, options.type_name)
    if not options.filter and not features:
        logger.warning("Neither features nor filter supplied to update.")
        return ""

    filter_xml = ensure_filter(options.filter, features, options)

    fields = StringIO()
    for name, value in iter_properties(first.whitelist, options.properties):
        if value is not None and value is not UNSET:
            value = value_to_xml_string(value)
        fields.write(_property_xml(name, value))

    geometry = options.geometry
    if geometry is None and features:
        geometry = features[0].geometry

    if first.geometry_name and geometry is not None:
        gml = geometry_to_gml(
            geometry,
            srs_name=first.srs_name,
            srs_dimension=first.srs_dimension,
            gml_ids=options.gml_ids,
            coordinate_order=options.coordinate_order,
        )
        geometry_field = render_tag(first.ns, first.geometry_name, inner=gml)
        fields.write(_property_xml(first.geometry_name, geometry_field))

    return render_tag(
        "wfs",
        "Update",
        {
            "inputFormat": options.input_format,
            "srsName": first.srs_name,
            "typeName": type_name,
        },
        f"{fields.getvalue()}{filter_xml}",
    )


def update(features, options: TransactionOptions | Mapping | None = None) -> str:
    """Create ``<wfs:Update>`` actions for the features.

    When ``options.properties`` is given, these values are written to all features
    in a single ``<wfs:Update>`` (optionally with ``options.geometry``).
    The features then only select what is updated, unless ``options.filter`` is given.

    Otherwise, each feature is updated with its own properties and geometry,
    writing one ``<wfs:Update>`` per feature.
    """
    options = as_options(options)
    features = parse_features(features)
    if options.properties is not None:
        return _update_bulk(features, options)

    if not features:
        logger.warning("No features supplied to update.")
        return ""

    # Encapsulate each update in its own Update tag
    return "".join(
        _update_bulk(
            [feature],
            options.replace(
                properties=feature.properties or {},
                geometry=feature.geometry if feature.geometry is not None else options.geometry,
            ),
        )
        for feature in features
    )


def delete(features, options: TransactionOptions | Mapping | None = None) -> str:
    """Create a ``<wfs:Delete>`` action.

    The typeName and filter are derived from the features,
    unless ``options.type_name`` and ``options.filter`` are given.
    """
    options = as_options(options)
    features = parse_features(features)
    first = resolve(features[0] if features else None, options)
    type_name = format_type_name(first.ns, first.layer, options.type_name)
    if not options.filter and not features:
        logger.warning("Neither features nor filter supplied to delete.")
        return ""

    filter_xml = ensure_filter(options.filter, features, options)
    return render_tag("wfs", "Delete", {"typeName": type_name}, filter_xml)


def replace(features, options: TransactionOptions | Mapping | None = None) -> str:
    """Create a ``<wfs:Replace>`` action for the first feature.

    A ``<wfs:Replace>`` writes a single replacement, so only the first feature is used.
    """
    options = as_options(options)
    features = parse_features(features)
    if not features:
        logger.warning("No features supplied to replace.")
        return ""
    elif len(features) > 1:
        logger.warning(
            "Only the first feature is replaced, ignoring %d other features.", len(features) - 1
        )

    feature = features[0]
    first = resolve(feature, options)
    replacement = translate_features([feature], options)
    filter_xml = ensure_filter(options.filter, [feature], options)
    return render_tag(
        "wfs",
        "Replace",
        {"inputFormat": options.input_format, "srsName": first.srs_name},
        f"{replacement}{filter_xml}",
    )
