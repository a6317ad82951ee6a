import logging
import math
from datetime import date

import pytest

from tests.utils import NAMESPACES, assert_xml_equal, parse_fragment
from wfstbuilder.actions import delete, insert, replace, translate_features, update
from wfstbuilder.exceptions import InvalidValueError, MissingFeatureIdError, MissingTypeNameError
from wfstbuilder.features import Feature, parse_features
from wfstbuilder.geometries import Point
from wfstbuilder.options import UNSET, TransactionOptions

ROAD_FILTER = '<fes:Filter><fes:ResourceId rid="roads.5"/><fes:ResourceId rid="roads.6"/></fes:Filter>'


class TestTranslateFeatures:
    def test_properties(self):
        """Prove that properties are escaped, and empty values are left out."""
        feature = Feature(
            id=1,
            properties={"name": "a < b & c", "remark": None, "opened": date(2020, 1, 31), "ok": True},
        )
        xml = translate_features([feature], TransactionOptions(ns="app", layer="roads"))
        assert xml == (
            '<app:roads gml:id="roads.1">'
            "<app:name>a &lt; b &amp; c</app:name>"
            "<app:opened>2020-01-31</app:opened>"
            "<app:ok>true</app:ok>"
            "</app:roads>"
        )

    def test_whitelist(self):
        feature = Feature(id=1, properties={"a": 1, "b": 2, "c": 3})
        xml = translate_features(
            [feature], TransactionOptions(ns="app", layer="roads", whitelist=["c", "a"])
        )
        assert xml == '<app:roads gml:id="roads.1"><app:c>3</app:c><app:a>1</app:a></app:roads>'

    def test_no_id(self):
        """Features without an id are written without gml:id, the server assigns one."""
        xml = translate_features([Feature(properties={"a": 1})], TransactionOptions(layer="roads"))
        assert xml == "<roads><a>1</a></roads>"

    def test_geometry_needs_name(self):
        """Without a geometry property name, there is no element to write the geometry in."""
        feature = Feature(id=1, geometry=Point([1, 2]))
        xml = translate_features([feature], TransactionOptions(ns="app", layer="roads"))
        assert "gml:Point" not in xml

    def test_geometry_srs(self):
        """Prove that the geometry receives the srsName and srsDimension."""
        feature = Feature(
            id=1, geometry=Point([1, 2]), srs_name="EPSG:28992", geometry_name="location"
        )
        xml = translate_features([feature], TransactionOptions(ns="app", layer="roads", srs_dimension=2))
        assert xml == (
            '<app:roads gml:id="roads.1"><app:location>'
            '<gml:Point srsName="EPSG:28992"><gml:pos srsDimension="2">1 2</gml:pos></gml:Point>'
            "</app:location></app:roads>"
        )

    def test_no_layer(self):
        with pytest.raises(MissingTypeNameError):
            translate_features([Feature(id=1)], TransactionOptions(ns="app"))

    def test_nan(self):
        with pytest.raises(InvalidValueError):
            translate_features(
                [Feature(id=1, properties={"height": math.nan})],
                TransactionOptions(layer="roads"),
            )


class TestInsert:
    def test_point_feature(self, point_feature):
        """Prove that a single feature is written with its geometry and properties."""
        xml = insert([point_feature], {"ns": "tiger", "layer": "poi", "geometryName": "geom"})
        assert xml == (
            "<wfs:Insert>"
            '<tiger:poi gml:id="poi.1">'
            "<tiger:geom><gml:Point><gml:pos>1 2</gml:pos></gml:Point></tiger:geom>"
            "<tiger:name>a</tiger:name>"
            "</tiger:poi>"
            "</wfs:Insert>"
        )

    def test_attributes(self, point_feature, tiger_options):
        options = tiger_options.replace(
            srs_name="EPSG:4326", input_format="application/gml+xml; version=3.2", handle="h1"
        )
        insert_element = parse_fragment(insert([point_feature], options))
        assert insert_element.attrib == {
            "inputFormat": "application/gml+xml; version=3.2",
            "srsName": "EPSG:4326",
            "handle": "h1",
        }
        point = insert_element.find("tiger:poi/tiger:geom/gml:Point", NAMESPACES)
        assert point.attrib["srsName"] == "EPSG:4326"

    def test_geojson(self, road_features, app_options):
        """Prove that GeoJSON mappings are accepted."""
        xml = insert({"type": "FeatureCollection", "features": road_features}, app_options)
        assert_xml_equal(
            xml,
            """
            <wfs:Insert>
              <app:roads gml:id="roads.5">
                <app:geometry>
                  <gml:LineString><gml:posList>4.89 52.37 4.9 52.38</gml:posList></gml:LineString>
                </app:geometry>
                <app:name>Main street</app:name>
                <app:lanes>2</app:lanes>
              </app:roads>
              <app:roads gml:id="roads.6">
                <app:geometry>
                  <gml:LineString><gml:posList>4.91 52.36 4.92 52.35</gml:posList></gml:LineString>
                </app:geometry>
                <app:name>Side street</app:name>
                <app:lanes>1</app:lanes>
              </app:roads>
            </wfs:Insert>
            """,
        )

    def test_coordinate_order(self, point_feature, tiger_options):
        xml = insert([point_feature], tiger_options.replace(coordinate_order=False))
        assert "<gml:pos>2 1</gml:pos>" in xml

    @pytest.mark.parametrize("features", [[], None, [None]])
    def test_empty(self, features, caplog):
        """Prove that empty input only gives a warning."""
        with caplog.at_level(logging.WARNING, logger="wfstbuilder.actions"):
            assert insert(features, {"ns": "app", "layer": "roads"}) == ""

        assert caplog.messages == ["No features supplied to insert."]


class TestUpdate:
    def test_bulk(self, road_features, app_options):
        """Prove that the same values are written to all features."""
        xml = update(
            road_features,
            app_options.replace(properties={"name": "New", "remark": None, "lanes": UNSET}),
        )
        assert xml == (
            '<wfs:Update typeName="app:roadsType">'
            "<wfs:Property>"
            "<wfs:ValueReference>name</wfs:ValueReference><wfs:Value>New</wfs:Value>"
            "</wfs:Property>"
            "<wfs:Property>"
            '<wfs:ValueReference>remark</wfs:ValueReference><wfs:Value xsi:nil="true"/>'
            "</wfs:Property>"
            "<wfs:Property><wfs:ValueReference>lanes</wfs:ValueReference></wfs:Property>"
            "<wfs:Property><wfs:ValueReference>geometry</wfs:ValueReference><wfs:Value>"
            "<app:geometry>"
            "<gml:LineString><gml:posList>4.89 52.37 4.9 52.38</gml:posList></gml:LineString>"
            "</app:geometry>"
            "</wfs:Value></wfs:Property>"
            f"{ROAD_FILTER}"
            "</wfs:Update>"
        )

    def test_bulk_geometry_option(self, road_features, app_options):
        """Prove that the geometry of the options replaces all geometries."""
        xml = update(
            road_features,
            app_options.replace(
                properties={},
                geometry={"type": "Point", "coordinates": [1, 2]},
                srs_name="EPSG:28992",
            ),
        )
        update_element = parse_fragment(xml)
        assert update_element.attrib == {"srsName": "EPSG:28992", "typeName": "app:roadsType"}
        properties = update_element.findall("wfs:Property", NAMESPACES)
        assert len(properties) == 1
        assert properties[0].find("wfs:ValueReference", NAMESPACES).text == "geometry"
        point = properties[0].find("wfs:Value/app:geometry/gml:Point", NAMESPACES)
        assert point.attrib["srsName"] == "EPSG:28992"
        assert point.find("gml:pos", NAMESPACES).text == "1 2"

    def test_bulk_filter(self):
        """Prove that an explicit filter and typeName can replace the features."""
        custom_filter = (
            "<fes:Filter><fes:PropertyIsEqualTo>"
            "<fes:ValueReference>lanes</fes:ValueReference><fes:Literal>1</fes:Literal>"
            "</fes:PropertyIsEqualTo></fes:Filter>"
        )
        xml = update(
            [],
            {"typeName": "app:Roads", "filter": custom_filter, "properties": {"lanes": 2}},
        )
        assert xml == (
            '<wfs:Update typeName="app:Roads">'
            "<wfs:Property>"
            "<wfs:ValueReference>lanes</wfs:ValueReference><wfs:Value>2</wfs:Value>"
            "</wfs:Property>"
            f"{custom_filter}"
            "</wfs:Update>"
        )

    def test_bulk_whitelist(self, road_features, app_options):
        xml = update(
            road_features,
            app_options.replace(geometry_name=None, properties={"a": 1, "b": 2}, whitelist=["b"]),
        )
        update_element = parse_fragment(xml)
        references = update_element.findall("wfs:Property/wfs:ValueReference", NAMESPACES)
        assert [ref.text for ref in references] == ["b"]

    def test_bulk_empty(self, caplog):
        with caplog.at_level(logging.WARNING, logger="wfstbuilder.actions"):
            assert update([], {"ns": "app", "layer": "roads", "properties": {"a": 1}}) == ""

        assert caplog.messages == ["Neither features nor filter supplied to update."]

    @pytest.mark.parametrize(
        "features,options",
        [
            ([Feature(id=1, properties={"a": 1})], {}),
            ([], {"properties": {"a": 1}}),
        ],
        ids=["per-feature", "bulk-empty"],
    )
    def test_missing_type_name(self, features, options):
        """Prove that an update without ns, layer or typeName can't be written."""
        with pytest.raises(MissingTypeNameError):
            update(features, options)

    def test_per_feature(self, road_features, app_options):
        """Prove that each feature is updated with its own data."""
        xml = update(road_features, app_options)
        updates = parse_fragment(f"<wfs:Transaction>{xml}</wfs:Transaction>")
        assert len(updates) == 2

        for update_element, expect_id, expect_name in zip(
            updates, ["roads.5", "roads.6"], ["Main street", "Side street"]
        ):
            assert update_element.attrib["typeName"] == "app:roadsType"
            values = {
                prop.find("wfs:ValueReference", NAMESPACES).text: prop.find("wfs:Value", NAMESPACES)
                for prop in update_element.findall("wfs:Property", NAMESPACES)
            }
            assert list(values) == ["name", "lanes", "geometry"]
            assert values["name"].text == expect_name
            assert values["geometry"].find("app:geometry/gml:LineString", NAMESPACES) is not None

            resource_ids = update_element.findall("fes:Filter/fes:ResourceId", NAMESPACES)
            assert [rid.attrib["rid"] for rid in resource_ids] == [expect_id]

    def test_per_feature_no_id(self, app_options):
        with pytest.raises(MissingFeatureIdError):
            update([Feature(properties={"a": 1})], app_options)

    def test_per_feature_empty(self, caplog):
        with caplog.at_level(logging.WARNING, logger="wfstbuilder.actions"):
            assert update([], {"ns": "app", "layer": "roads"}) == ""

        assert caplog.messages == ["No features supplied to update."]


class TestDelete:
    def test_delete(self, road_features, app_options):
        xml = delete(road_features, app_options)
        assert xml == f'<wfs:Delete typeName="app:roadsType">{ROAD_FILTER}</wfs:Delete>'

    def test_layer_from_feature(self):
        """Prove that the first feature provides the typeName."""
        features = [Feature(id=5, layer="roads", ns="app"), Feature(id=7, layer="paths")]
        xml = delete(features)
        assert xml == (
            '<wfs:Delete typeName="app:roadsType">'
            '<fes:Filter><fes:ResourceId rid="roads.5"/><fes:ResourceId rid="paths.7"/></fes:Filter>'
            "</wfs:Delete>"
        )

    def test_explicit(self):
        custom_filter = '<fes:Filter><fes:ResourceId rid="roads.1"/></fes:Filter>'
        xml = delete(None, {"typeName": "app:Roads", "filter": custom_filter})
        assert xml == f'<wfs:Delete typeName="app:Roads">{custom_filter}</wfs:Delete>'

    def test_missing_type_name(self):
        with pytest.raises(MissingTypeNameError):
            delete([{"type": "Feature", "id": 1, "geometry": None, "properties": {}}])

    def test_empty_missing_type_name(self, caplog):
        """Prove that the typeName is checked before the empty input is ignored."""
        with pytest.raises(MissingTypeNameError):
            delete([], {})

        assert caplog.messages == []

    def test_empty(self, caplog):
        with caplog.at_level(logging.WARNING, logger="wfstbuilder.actions"):
            assert delete([], {"ns": "app", "layer": "roads"}) == ""

        assert caplog.messages == ["Neither features nor filter supplied to delete."]


class TestReplace:
    def test_replace(self, road_features, app_options):
        xml = replace(road_features[:1], app_options.replace(srs_name="EPSG:4326"))
        assert xml == (
            '<wfs:Replace srsName="EPSG:4326">'
            '<app:roads gml:id="roads.5">'
            '<app:geometry><gml:LineString srsName="EPSG:4326">'
            "<gml:posList>4.89 52.37 4.9 52.38</gml:posList>"
            "</gml:LineString></app:geometry>"
            "<app:name>Main street</app:name>"
            "<app:lanes>2</app:lanes>"
            "</app:roads>"
            '<fes:Filter><fes:ResourceId rid="roads.5"/></fes:Filter>'
            "</wfs:Replace>"
        )

    def test_first_feature_only(self, road_features, app_options, caplog):
        """Prove that only the first feature is replaced, and the others are reported."""
        with caplog.at_level(logging.WARNING, logger="wfstbuilder.actions"):
            xml = replace(road_features, app_options)

        assert caplog.messages == ["Only the first feature is replaced, ignoring 1 other features."]
        replace_element = parse_fragment(xml)
        assert len(replace_element.findall("app:roads", NAMESPACES)) == 1
        resource_ids = replace_element.findall("fes:Filter/fes:ResourceId", NAMESPACES)
        assert [rid.attrib["rid"] for rid in resource_ids] == ["roads.5"]

    def test_explicit_filter(self, app_options):
        custom_filter = '<fes:Filter><fes:ResourceId rid="roads.99"/></fes:Filter>'
        features = parse_features({"type": "Feature", "properties": {"name": "x"}})
        xml = replace(features, app_options.replace(filter=custom_filter, input_format="text/xml"))
        assert xml == (
            '<wfs:Replace inputFormat="text/xml">'
            f"<app:roads><app:name>x</app:name></app:roads>{custom_filter}"
            "</wfs:Replace>"
        )

    def test_empty(self, caplog):
        with caplog.at_level(logging.WARNING, logger="wfstbuilder.actions"):
            assert replace([], {"ns": "app", "layer": "roads"}) == ""

        assert caplog.messages == ["No features supplied to replace."]
