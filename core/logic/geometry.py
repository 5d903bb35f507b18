# ============================================================================
# GEOMETRY SERIALIZATION
# ============================================================================
# STATUS: Core - Geometry helpers
# PURPOSE: Serialize injected geometries to GeoJSON text
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: to_shapely, serialize_geometry
# DEPENDENCIES: shapely
# ============================================================================
"""
Geometry Serialization for GEOMETRY Parameters.

The host map hands the form a drawn geometry as GeoJSON, Esri JSON, WKT
or a shapely object. GEOMETRY fields are submitted as compact GeoJSON
geometry text.

Exports:
    to_shapely: Parse a supported geometry input into a shapely geometry
    serialize_geometry: Compact GeoJSON text, or None when unparsable
"""

import json
from typing import Any, Dict, Optional

from shapely import wkt
from shapely.errors import ShapelyError
from shapely.geometry import LineString, MultiLineString, MultiPoint, Point, Polygon, mapping, shape
from shapely.geometry.base import BaseGeometry

from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SCHEMA, "geometry")

_PARSE_ERRORS = (ShapelyError, KeyError, IndexError, TypeError, ValueError, AttributeError)


def _from_esri_json(data: Dict[str, Any]) -> Optional[BaseGeometry]:
    """Esri JSON (rings/paths/points/x,y) to shapely; None for other dicts."""
    if "rings" in data:
        rings = data["rings"]
        if not rings:
            return Polygon()
        return Polygon(rings[0], rings[1:])
    if "paths" in data:
        paths = data["paths"]
        if len(paths) == 1:
            return LineString(paths[0])
        return MultiLineString(paths)
    if "points" in data:
        return MultiPoint(data["points"])
    if "x" in data and "y" in data:
        return Point(data["x"], data["y"])
    return None


def _from_dict(data: Dict[str, Any]) -> Optional[BaseGeometry]:
    geo_type = data.get("type")
    if geo_type == "Feature":
        inner = data.get("geometry")
        return _from_dict(inner) if isinstance(inner, dict) else None
    if geo_type == "FeatureCollection":
        features = data.get("features") or []
        return _from_dict(features[0]) if len(features) == 1 else None
    if isinstance(geo_type, str):
        return shape(data)
    return _from_esri_json(data)


def to_shapely(geometry: Any) -> Optional[BaseGeometry]:
    """
    Parse a geometry input.

    Args:
        geometry: shapely geometry, GeoJSON/Esri JSON dict, or a string
            holding JSON or WKT

    Returns:
        shapely geometry, or None when the input cannot be parsed
    """
    if geometry is None:
        return None
    if isinstance(geometry, BaseGeometry):
        return geometry
    try:
        if isinstance(geometry, dict):
            return _from_dict(geometry)
        if isinstance(geometry, str):
            text = geometry.strip()
            if not text:
                return None
            if text.startswith("{"):
                parsed = json.loads(text)
                return _from_dict(parsed) if isinstance(parsed, dict) else None
            return wkt.loads(text)
    except _PARSE_ERRORS as e:
        logger.warning(f"Geometry could not be parsed: {type(e).__name__}: {e}")
        return None
    return None


def serialize_geometry(geometry: Any) -> Optional[str]:
    """
    Serialize a geometry input to compact GeoJSON geometry text.

    Empty geometries are treated like unparsable ones. The input is never
    mutated.
    """
    parsed = to_shapely(geometry)
    if parsed is None or parsed.is_empty:
        return None
    return json.dumps(mapping(parsed), separators=(",", ":"))
