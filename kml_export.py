"""KML export of distance tracks and green boundaries."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from logger import LogCategory, get_logger
from models import GeoSample

KML_NAMESPACE = "http://www.opengis.net/kml/2.2"


def _coordinates(points: Sequence[GeoSample]) -> str:
    # KML orders coordinates lng,lat,alt
    return " ".join(
        f"{point.longitude},{point.latitude},{point.altitude or 0}" for point in points
    )


def _document(name: str) -> tuple:
    kml = ET.Element("kml", xmlns=KML_NAMESPACE)
    document = ET.SubElement(kml, "Document")
    ET.SubElement(document, "name").text = name
    ET.SubElement(document, "open").text = "1"
    return kml, document


def _extended_data(placemark: ET.Element, metadata: Optional[Dict[str, object]]) -> None:
    if not metadata:
        return
    extended = ET.SubElement(placemark, "ExtendedData")
    for key, value in metadata.items():
        if value in (None, ""):
            continue
        data_element = ET.SubElement(extended, "Data", name=key)
        ET.SubElement(data_element, "value").text = str(value)


def track_to_kml(
    points: Sequence[GeoSample], name: str = "GreenWalk Track",
    metadata: Optional[Dict[str, object]] = None,
) -> ET.ElementTree:
    """Build a KML document holding the track as a LineString."""
    if len(points) < 2:
        raise ValueError("A track needs at least two points to export")
    kml, document = _document(name)
    placemark = ET.SubElement(document, "Placemark")
    ET.SubElement(placemark, "name").text = name
    _extended_data(placemark, metadata)
    line = ET.SubElement(placemark, "LineString")
    ET.SubElement(line, "tessellate").text = "1"
    ET.SubElement(line, "coordinates").text = _coordinates(points)
    return ET.ElementTree(kml)


def green_to_kml(
    ring: Sequence[GeoSample], name: str = "GreenWalk Green",
    metadata: Optional[Dict[str, object]] = None,
) -> ET.ElementTree:
    """Build a KML document holding the boundary as a Polygon.

    ``ring`` must already repeat its first point at the end.
    """
    if len(ring) < 4:
        raise ValueError("A green boundary needs at least three vertices to export")
    if ring[0] != ring[-1]:
        raise ValueError("Boundary ring must end where it starts")
    kml, document = _document(name)
    placemark = ET.SubElement(document, "Placemark")
    ET.SubElement(placemark, "name").text = name
    _extended_data(placemark, metadata)
    polygon = ET.SubElement(placemark, "Polygon")
    outer = ET.SubElement(polygon, "outerBoundaryIs")
    linear_ring = ET.SubElement(outer, "LinearRing")
    ET.SubElement(linear_ring, "coordinates").text = _coordinates(ring)
    return ET.ElementTree(kml)


def write_kml(tree: ET.ElementTree, file_path: Union[str, Path]) -> Path:
    """Write ``tree`` to ``file_path`` and return the resolved path."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tree.write(path, encoding="utf-8", xml_declaration=True)
    get_logger().info("KML exported", category=LogCategory.EXPORT, path=str(path))
    return path
