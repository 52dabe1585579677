# ============================================================================
# RASTER SERVER CONFIG MODEL
# ============================================================================
# STATUS: Core model - On-demand raster server sidecar document
# PURPOSE: Typed form of <RasterServer> documents and their XML mapping
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: RasterServerConfig, RasterServerSource, RasterServerProperty
# DEPENDENCIES: pydantic, xml.etree
# ============================================================================
"""
Raster Server Config Model

The sidecar document the on-demand raster server reads to synthesize
tiles from original source files:

    <RasterServer version="1.0">
        <Sector>...</Sector>
        <Property name="..." value="..."/>
        <Sources>
            <Source type="file" path="/abs/path.tif">
                <Sector>...</Sector>
            </Source>
        </Sources>
    </RasterServer>

File path convention: <installDir>/<cacheName>/<datasetName>.RasterServer.xml
"""

from pathlib import Path
from typing import List, Optional, Union
from xml.etree import ElementTree as ET

from pydantic import BaseModel, Field

from __version__ import RASTER_SERVER_DOC_VERSION
from core.documents import append_sector, read_sector, save_document
from core.models.sector import Sector

RASTER_SERVER_SUFFIX = ".RasterServer.xml"


def raster_server_config_path(
    install_location: Union[str, Path],
    cache_name: str,
    dataset_name: str,
) -> Path:
    """<installDir>/<cacheName>/<datasetName>.RasterServer.xml"""
    return Path(install_location) / cache_name / f"{dataset_name}{RASTER_SERVER_SUFFIX}"


class RasterServerSource(BaseModel):
    """One file the raster server reads from."""
    path: str = Field(..., min_length=1)
    type: str = "file"
    sector: Optional[Sector] = None

    model_config = {"frozen": True}


class RasterServerProperty(BaseModel):
    """A name/value pair copied from the production parameters."""
    name: str = Field(..., min_length=1)
    value: str = Field(..., min_length=1)

    model_config = {"frozen": True}


class RasterServerConfig(BaseModel):
    """Typed RasterServer sidecar document."""
    version: str = RASTER_SERVER_DOC_VERSION
    sector: Sector
    sources: List[RasterServerSource] = Field(default_factory=list)
    properties: List[RasterServerProperty] = Field(default_factory=list)

    def to_element(self) -> ET.Element:
        """Build the XML tree. Element order: Sector, Property*, Sources."""
        root = ET.Element("RasterServer", {"version": self.version})
        append_sector(root, "Sector", self.sector)

        for prop in self.properties:
            ET.SubElement(root, "Property", {"name": prop.name, "value": prop.value})

        sources_el = ET.SubElement(root, "Sources")
        for source in self.sources:
            source_el = ET.SubElement(sources_el, "Source", {"type": source.type, "path": source.path})
            if source.sector is not None:
                append_sector(source_el, "Sector", source.sector)

        return root

    @classmethod
    def from_element(cls, root: ET.Element) -> "RasterServerConfig":
        """Parse a <RasterServer> element."""
        if root.tag != "RasterServer":
            raise ValueError(f"Not a RasterServer document: <{root.tag}>")

        sector = read_sector(root, "Sector")
        if sector is None:
            raise ValueError("RasterServer document has no Sector")

        sources = []
        for source_el in root.findall("Sources/Source"):
            sources.append(RasterServerSource(
                path=source_el.get("path", ""),
                type=source_el.get("type", "file"),
                sector=read_sector(source_el, "Sector"),
            ))

        properties = [
            RasterServerProperty(name=p.get("name", ""), value=p.get("value", ""))
            for p in root.findall("Property")
        ]

        return cls(
            version=root.get("version", RASTER_SERVER_DOC_VERSION),
            sector=sector,
            sources=sources,
            properties=properties,
        )

    def property_value(self, name: str) -> Optional[str]:
        for prop in self.properties:
            if prop.name == name:
                return prop.value
        return None

    def write(self, path: Union[str, Path]) -> Path:
        """Persist the document."""
        return save_document(self.to_element(), path)
