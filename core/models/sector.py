# ============================================================================
# SECTOR MODEL
# ============================================================================
# STATUS: Core model - Geographic extent
# PURPOSE: Rectangular latitude/longitude extent used by rasters and configs
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: Sector
# DEPENDENCIES: pydantic
# ============================================================================
"""
Sector Model

A rectangular geographic extent in decimal degrees. Sectors are immutable
and hashable so they can be compared against the whole-globe extent and
unioned across the rasters of a dataset.
"""

from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, Field, model_validator


class Sector(BaseModel):
    """
    Min/max latitude and longitude in degrees.

    Invariants: -90 <= min_latitude <= max_latitude <= 90 and
    -180 <= min_longitude <= max_longitude <= 180.
    """
    min_latitude: float = Field(..., ge=-90.0, le=90.0)
    max_latitude: float = Field(..., ge=-90.0, le=90.0)
    min_longitude: float = Field(..., ge=-180.0, le=180.0)
    max_longitude: float = Field(..., ge=-180.0, le=180.0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_ordering(self) -> "Sector":
        if self.min_latitude > self.max_latitude:
            raise ValueError(
                f"min_latitude {self.min_latitude} > max_latitude {self.max_latitude}"
            )
        if self.min_longitude > self.max_longitude:
            raise ValueError(
                f"min_longitude {self.min_longitude} > max_longitude {self.max_longitude}"
            )
        return self

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================

    @classmethod
    def full_sphere(cls) -> "Sector":
        """The whole-globe extent."""
        return cls(min_latitude=-90.0, max_latitude=90.0, min_longitude=-180.0, max_longitude=180.0)

    @classmethod
    def from_degrees(
        cls,
        min_latitude: float,
        max_latitude: float,
        min_longitude: float,
        max_longitude: float,
    ) -> "Sector":
        return cls(
            min_latitude=min_latitude,
            max_latitude=max_latitude,
            min_longitude=min_longitude,
            max_longitude=max_longitude,
        )

    @classmethod
    def from_bounds(cls, bounds: Sequence[float]) -> "Sector":
        """
        Build from a (west, south, east, north) bounds tuple.

        This is the ordering rasterio uses for dataset bounds.
        """
        west, south, east, north = bounds
        return cls(
            min_latitude=max(-90.0, min(south, north)),
            max_latitude=min(90.0, max(south, north)),
            min_longitude=max(-180.0, min(west, east)),
            max_longitude=min(180.0, max(west, east)),
        )

    @classmethod
    def union_all(cls, sectors: Iterable[Optional["Sector"]]) -> Optional["Sector"]:
        """Union of all non-None sectors, or None if there are none."""
        result: Optional[Sector] = None
        for sector in sectors:
            if sector is None:
                continue
            result = sector if result is None else result.union(sector)
        return result

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    @property
    def delta_lat(self) -> float:
        return self.max_latitude - self.min_latitude

    @property
    def delta_lon(self) -> float:
        return self.max_longitude - self.min_longitude

    @property
    def is_full_sphere(self) -> bool:
        return self == Sector.full_sphere()

    def union(self, other: "Sector") -> "Sector":
        """Smallest sector containing both."""
        return Sector(
            min_latitude=min(self.min_latitude, other.min_latitude),
            max_latitude=max(self.max_latitude, other.max_latitude),
            min_longitude=min(self.min_longitude, other.min_longitude),
            max_longitude=max(self.max_longitude, other.max_longitude),
        )

    def intersects(self, other: "Sector") -> bool:
        """True if the sectors overlap with non-zero area."""
        return (
            self.min_latitude < other.max_latitude
            and other.min_latitude < self.max_latitude
            and self.min_longitude < other.max_longitude
            and other.min_longitude < self.max_longitude
        )

    def to_bounds(self):
        """(west, south, east, north) tuple."""
        return (self.min_longitude, self.min_latitude, self.max_longitude, self.max_latitude)

    def __str__(self) -> str:
        return (
            f"({self.min_latitude}, {self.min_longitude}) - "
            f"({self.max_latitude}, {self.max_longitude})"
        )
