from __future__ import annotations

import django
import pyproj
import pytest

from tests.utils import APP_NS
from wfstbuilder import conf
from wfstbuilder.features import Feature
from wfstbuilder.geometries import Point, Polygon
from wfstbuilder.options import TransactionOptions


def pytest_configure():
    print(f'Running with Django {django.__version__}, PROJ="{pyproj.proj_version_str}"')
    print(f"Using WFST_COORDINATE_ORDER={conf.WFST_COORDINATE_ORDER}")


@pytest.fixture()
def point_feature() -> Feature:
    return Feature(
        id="1",
        geometry=Point([1, 2]),
        properties={"name": "a"},
    )


@pytest.fixture()
def road_features() -> list[dict]:
    """Two features in GeoJSON notation, as they would be read from a file."""
    return [
        {
            "type": "Feature",
            "id": 5,
            "geometry": {"type": "LineString", "coordinates": [[4.89, 52.37], [4.90, 52.38]]},
            "properties": {"name": "Main street", "lanes": 2},
        },
        {
            "type": "Feature",
            "id": 6,
            "geometry": {"type": "LineString", "coordinates": [[4.91, 52.36], [4.92, 52.35]]},
            "properties": {"name": "Side street", "lanes": 1},
        },
    ]


@pytest.fixture()
def square_polygon() -> Polygon:
    """A polygon with a hole."""
    return Polygon(
        [
            [[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]],
            [[2, 2], [2, 4], [4, 4], [4, 2], [2, 2]],
        ]
    )


@pytest.fixture()
def tiger_options() -> TransactionOptions:
    return TransactionOptions(
        ns="tiger",
        layer="poi",
        geometry_name="geom",
        ns_assignments={"tiger": "http://www.census.gov"},
    )


@pytest.fixture()
def app_options() -> TransactionOptions:
    return TransactionOptions(
        ns="app",
        layer="roads",
        geometry_name="geometry",
        ns_assignments={"app": APP_NS},
    )
