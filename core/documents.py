# ============================================================================
# CONFIGURATION DOCUMENT HELPERS
# ============================================================================
# STATUS: Core - XML document read/write helpers
# PURPOSE: Shared element builders for data config and RasterServer documents
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Document Helpers

Installed datasets are described by XML documents that the display runtime
reads back. The layouts here are a contract: element names, attribute
names and nesting must not drift.

Sector layout:
    <Sector>
        <SouthWest><LatLon latitude="..." longitude="..." units="degrees"/></SouthWest>
        <NorthEast><LatLon latitude="..." longitude="..." units="degrees"/></NorthEast>
    </Sector>
"""

import math
import os
import tempfile
from pathlib import Path
from typing import Optional, Union
from xml.etree import ElementTree as ET

from core.contracts import ConfigType
from core.models.sector import Sector


def format_degrees(value: float) -> str:
    """Render a degree value the way config documents store it."""
    return repr(float(value))


def append_element(parent: ET.Element, tag: str, text: Optional[str] = None, **attrs) -> ET.Element:
    """Append a child element with optional text and string attributes."""
    child = ET.SubElement(parent, tag, {k: str(v) for k, v in attrs.items()})
    if text is not None:
        child.text = str(text)
    return child


def append_lat_lon(parent: ET.Element, tag: str, latitude: float, longitude: float) -> ET.Element:
    wrapper = ET.SubElement(parent, tag)
    ET.SubElement(
        wrapper,
        "LatLon",
        {
            "latitude": format_degrees(latitude),
            "longitude": format_degrees(longitude),
            "units": "degrees",
        },
    )
    return wrapper


def append_sector(parent: ET.Element, tag: str, sector: Sector) -> ET.Element:
    """Append a sector element (SouthWest / NorthEast corners)."""
    element = ET.SubElement(parent, tag)
    append_lat_lon(element, "SouthWest", sector.min_latitude, sector.min_longitude)
    append_lat_lon(element, "NorthEast", sector.max_latitude, sector.max_longitude)
    return element


def _read_lat_lon(element: Optional[ET.Element]):
    if element is None:
        return None
    lat_lon = element.find("LatLon")
    if lat_lon is None:
        return None
    try:
        latitude = float(lat_lon.get("latitude"))
        longitude = float(lat_lon.get("longitude"))
    except (TypeError, ValueError):
        return None
    if lat_lon.get("units", "degrees") == "radians":
        latitude, longitude = math.degrees(latitude), math.degrees(longitude)
    return latitude, longitude


def read_sector(element: Optional[ET.Element], path: str = "Sector") -> Optional[Sector]:
    """
    Read a sector below element, or None if absent or malformed.

    Args:
        element: Element to search from
        path: ElementTree path of the Sector element
    """
    if element is None:
        return None
    sector_el = element if path in ("", ".") else element.find(path)
    if sector_el is None:
        return None
    south_west = _read_lat_lon(sector_el.find("SouthWest"))
    north_east = _read_lat_lon(sector_el.find("NorthEast"))
    if south_west is None or north_east is None:
        return None
    try:
        return Sector.from_degrees(south_west[0], north_east[0], south_west[1], north_east[1])
    except ValueError:
        return None


def get_config_type(element: Optional[ET.Element]) -> Optional[ConfigType]:
    """Layer / ElevationModel from a document's root tag."""
    if element is None:
        return None
    return ConfigType.from_tag(element.tag)


def get_display_name(element: Optional[ET.Element]) -> Optional[str]:
    """DisplayName text, falling back to DatasetName."""
    if element is None:
        return None
    for tag in ("DisplayName", "DatasetName"):
        text = element.findtext(tag)
        if text and text.strip():
            return text.strip()
    return None


def save_document(root: ET.Element, path: Union[str, Path]) -> Path:
    """
    Write a document atomically with an XML declaration.

    The parent directory is created if needed. The file is written to a
    temp file in the same directory and renamed into place so readers
    never see a half-written config.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    tree = ET.ElementTree(root)
    ET.indent(tree, space="    ")

    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            tree.write(f, encoding="UTF-8", xml_declaration=True)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise
    return path


def load_document(path: Union[str, Path]) -> ET.Element:
    """Parse a document and return its root element."""
    return ET.parse(str(path)).getroot()


__all__ = [
    "format_degrees",
    "append_element",
    "append_sector",
    "read_sector",
    "get_config_type",
    "get_display_name",
    "save_document",
    "load_document",
]
