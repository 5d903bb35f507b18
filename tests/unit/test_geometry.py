"""
Geometry serialization tests.
"""

import json

from shapely.geometry import Point, Polygon

from core.logic import serialize_geometry, to_shapely


class TestToShapely:
    def test_geojson_dict(self):
        geometry = to_shapely({"type": "Point", "coordinates": [1, 2]})
        assert geometry.equals(Point(1, 2))

    def test_feature_unwrapped(self):
        feature = {"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [5, 6]}}
        assert to_shapely(feature).equals(Point(5, 6))

    def test_esri_polygon(self):
        esri = {"rings": [[[0, 0], [1, 0], [1, 1], [0, 0]]], "spatialReference": {"wkid": 4326}}
        assert to_shapely(esri).equals(Polygon([(0, 0), (1, 0), (1, 1)]))

    def test_esri_point(self):
        assert to_shapely({"x": 3, "y": 4}).equals(Point(3, 4))

    def test_wkt_and_json_strings(self):
        assert to_shapely("POINT (1 2)").equals(Point(1, 2))
        assert to_shapely('{"type": "Point", "coordinates": [1, 2]}').equals(Point(1, 2))

    def test_unparsable(self):
        assert to_shapely("garbage") is None
        assert to_shapely({"foo": "bar"}) is None
        assert to_shapely("") is None
        assert to_shapely(42) is None


class TestSerialize:
    def test_compact_geojson(self):
        text = serialize_geometry(Point(1, 2))
        assert " " not in text
        assert json.loads(text) == {"type": "Point", "coordinates": [1.0, 2.0]}

    def test_input_not_mutated(self):
        data = {"type": "Point", "coordinates": [1, 2]}
        serialize_geometry(data)
        assert data == {"type": "Point", "coordinates": [1, 2]}

    def test_empty_geometry(self):
        assert serialize_geometry("POINT EMPTY") is None
        assert serialize_geometry(None) is None
