"""
Mirathi - Geographic Value Objects

Counties, GPS coordinates constrained to Kenya's national bounds, and
composite locations used for places of birth and death.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from config import get_config
from domain.value_objects.base import DataQualityIssue, ValueObject, coerce_enum


class KenyanCounty(str, Enum):
    """The 47 counties (Constitution, First Schedule) plus UNKNOWN for legacy rows."""
    MOMBASA = "MOMBASA"
    KWALE = "KWALE"
    KILIFI = "KILIFI"
    TANA_RIVER = "TANA_RIVER"
    LAMU = "LAMU"
    TAITA_TAVETA = "TAITA_TAVETA"
    GARISSA = "GARISSA"
    WAJIR = "WAJIR"
    MANDERA = "MANDERA"
    MARSABIT = "MARSABIT"
    ISIOLO = "ISIOLO"
    MERU = "MERU"
    THARAKA_NITHI = "THARAKA_NITHI"
    EMBU = "EMBU"
    KITUI = "KITUI"
    MACHAKOS = "MACHAKOS"
    MAKUENI = "MAKUENI"
    NYANDARUA = "NYANDARUA"
    NYERI = "NYERI"
    KIRINYAGA = "KIRINYAGA"
    MURANGA = "MURANGA"
    KIAMBU = "KIAMBU"
    TURKANA = "TURKANA"
    WEST_POKOT = "WEST_POKOT"
    SAMBURU = "SAMBURU"
    TRANS_NZOIA = "TRANS_NZOIA"
    UASIN_GISHU = "UASIN_GISHU"
    ELGEYO_MARAKWET = "ELGEYO_MARAKWET"
    NANDI = "NANDI"
    BARINGO = "BARINGO"
    LAIKIPIA = "LAIKIPIA"
    NAKURU = "NAKURU"
    NAROK = "NAROK"
    KAJIADO = "KAJIADO"
    KERICHO = "KERICHO"
    BOMET = "BOMET"
    KAKAMEGA = "KAKAMEGA"
    VIHIGA = "VIHIGA"
    BUNGOMA = "BUNGOMA"
    BUSIA = "BUSIA"
    SIAYA = "SIAYA"
    KISUMU = "KISUMU"
    HOMA_BAY = "HOMA_BAY"
    MIGORI = "MIGORI"
    KISII = "KISII"
    NYAMIRA = "NYAMIRA"
    NAIROBI = "NAIROBI"
    UNKNOWN = "UNKNOWN"

    @property
    def code(self) -> Optional[int]:
        """Official county code (001-047); ``None`` for UNKNOWN."""
        if self is KenyanCounty.UNKNOWN:
            return None
        return list(KenyanCounty).index(self) + 1

    @property
    def display_name(self) -> str:
        if self is KenyanCounty.MURANGA:
            return "Murang'a"
        return self.value.replace("_", " ").title()

    @classmethod
    def parse(cls, value: Optional[str]) -> "KenyanCounty":
        """Lenient parse for legacy data: missing or unrecognised values map to UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        key = value.strip().upper().replace("'", "").replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


class CoordinateSource(str, Enum):
    GPS_DEVICE = "GPS_DEVICE"
    GOOGLE_MAPS = "GOOGLE_MAPS"
    MANUAL_ENTRY = "MANUAL_ENTRY"
    SURVEY = "SURVEY"
    UNKNOWN = "UNKNOWN"


EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True, slots=True)
class GPSCoordinates(ValueObject):
    """
    A point inside Kenya.

    Latitude and longitude must fall within the national bounding box;
    construction fails otherwise, naming the axis and the violated bound.
    ``distance_to`` and ``bearing_to`` use a spherical earth and are
    approximate.
    """
    latitude: float
    longitude: float
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    source: CoordinateSource = CoordinateSource.UNKNOWN
    captured_at: Optional[datetime] = None

    LATITUDE_BOUNDS: ClassVar[Tuple[float, float]] = (-4.72, 5.03)
    LONGITUDE_BOUNDS: ClassVar[Tuple[float, float]] = (33.90, 41.91)
    ALTITUDE_BOUNDS: ClassVar[Tuple[float, float]] = (-100.0, 6000.0)
    MAX_ACCURACY_METERS: ClassVar[float] = 10000.0

    def normalize(self) -> None:
        for name in ("latitude", "longitude", "altitude", "accuracy"):
            self._coerce_float(name)
        coerce_enum(self, "source", CoordinateSource)
        if self.source is None:
            self._set("source", CoordinateSource.UNKNOWN)

    def _coerce_float(self, name: str) -> None:
        value = getattr(self, name)
        if value is None:
            if name in ("latitude", "longitude"):
                raise self._invalid(f"{name.capitalize()} is required", name)
            return
        try:
            self._set(name, float(value))
        except (TypeError, ValueError) as e:
            raise self._invalid(f"{name.capitalize()} must be numeric: {value!r}", name, value=value) from e

    def validate(self) -> None:
        self._check_axis("latitude", self.latitude, self.LATITUDE_BOUNDS)
        self._check_axis("longitude", self.longitude, self.LONGITUDE_BOUNDS)

        if self.altitude is not None:
            low, high = self.ALTITUDE_BOUNDS
            if not low <= self.altitude <= high:
                raise self._invalid(
                    f"Altitude {self.altitude} m outside [{low}, {high}]",
                    "altitude",
                    value=self.altitude,
                    min=low,
                    max=high,
                )

        if self.accuracy is not None:
            if self.accuracy < 0 or self.accuracy > self.MAX_ACCURACY_METERS:
                raise self._invalid(
                    f"Accuracy {self.accuracy} m is not plausible",
                    "accuracy",
                    value=self.accuracy,
                    min=0.0,
                    max=self.MAX_ACCURACY_METERS,
                )
            threshold = get_config().data_quality.low_accuracy_meters
            if self.accuracy >= threshold:
                self._advise(
                    DataQualityIssue.LOW_POSITIONAL_ACCURACY,
                    "accuracy",
                    f"Positional accuracy {self.accuracy} m is at or above {threshold} m",
                    value=self.accuracy,
                    threshold=threshold,
                )

    def _check_axis(self, axis: str, value: float, bounds: Tuple[float, float]) -> None:
        low, high = bounds
        if math.isnan(value) or value < low:
            violated = "min"
        elif value > high:
            violated = "max"
        else:
            return
        raise self._invalid(
            f"{axis.capitalize()} {value} is outside Kenya's bounds [{low}, {high}]",
            axis,
            value=value,
            min=low,
            max=high,
            violated_bound=violated,
        )

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @classmethod
    def is_within_bounds(cls, latitude: float, longitude: float) -> bool:
        lat_low, lat_high = cls.LATITUDE_BOUNDS
        lon_low, lon_high = cls.LONGITUDE_BOUNDS
        return lat_low <= latitude <= lat_high and lon_low <= longitude <= lon_high

    @property
    def is_within_kenya(self) -> bool:
        return self.is_within_bounds(self.latitude, self.longitude)

    def distance_to(self, other: "GPSCoordinates") -> float:
        """Great-circle distance in kilometres (haversine)."""
        lat1, lat2 = math.radians(self.latitude), math.radians(other.latitude)
        d_lat = lat2 - lat1
        d_lon = math.radians(other.longitude - self.longitude)

        a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
        return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    def bearing_to(self, other: "GPSCoordinates") -> float:
        """Initial bearing in degrees clockwise from north, in [0, 360)."""
        lat1, lat2 = math.radians(self.latitude), math.radians(other.latitude)
        d_lon = math.radians(other.longitude - self.longitude)

        y = math.sin(d_lon) * math.cos(lat2)
        x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(d_lon)
        return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0

    @property
    def as_dms(self) -> Dict[str, str]:
        return {
            "latitude": _to_dms(self.latitude, "N", "S"),
            "longitude": _to_dms(self.longitude, "E", "W"),
        }

    @property
    def accuracy_rating(self) -> str:
        if self.accuracy is None:
            return "UNKNOWN"
        if self.accuracy < 10:
            return "HIGH"
        if self.accuracy < 100:
            return "MEDIUM"
        return "LOW"

    @property
    def source_reliability(self) -> str:
        if self.source in (CoordinateSource.SURVEY, CoordinateSource.GPS_DEVICE):
            return "HIGH"
        if self.source is CoordinateSource.GOOGLE_MAPS:
            return "MEDIUM"
        return "LOW"

    def _derived_projection(self) -> Dict[str, Any]:
        return {
            "is_within_kenya": self.is_within_kenya,
            "as_dms": self.as_dms,
            "accuracy_rating": self.accuracy_rating,
            "source_reliability": self.source_reliability,
        }

    def __str__(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"


def _to_dms(decimal: float, positive: str, negative: str) -> str:
    absolute = abs(decimal)
    degrees = int(absolute)
    minutes_decimal = (absolute - degrees) * 60
    minutes = int(minutes_decimal)
    seconds = round((minutes_decimal - minutes) * 60, 1)
    direction = positive if decimal >= 0 else negative
    return f"{degrees}°{minutes}'{seconds}\"{direction}"


@dataclass(frozen=True, slots=True)
class KenyanLocation(ValueObject):
    """Administrative location (county down to village) with optional coordinates."""
    county: KenyanCounty = KenyanCounty.UNKNOWN
    sub_county: Optional[str] = None
    ward: Optional[str] = None
    village: Optional[str] = None
    place_name: Optional[str] = None
    coordinates: Optional[GPSCoordinates] = None
    is_urban: bool = False

    def normalize(self) -> None:
        if not isinstance(self.county, KenyanCounty):
            self._set("county", KenyanCounty.parse(self.county))
        for name in ("sub_county", "ward", "village", "place_name"):
            value = getattr(self, name)
            if value is not None:
                self._set(name, value.strip() or None)

    def validate(self) -> None:
        for name in ("sub_county", "ward", "village", "place_name"):
            value = getattr(self, name)
            if value is not None and len(value) > 100:
                raise self._invalid(f"{name} exceeds 100 characters", name, length=len(value))

    @property
    def is_known(self) -> bool:
        return self.county is not KenyanCounty.UNKNOWN

    @property
    def description(self) -> str:
        parts = [self.place_name, self.village, self.ward, self.sub_county]
        named = [p for p in parts if p]
        if self.is_known:
            named.append(f"{self.county.display_name} County")
        return ", ".join(named) if named else "Unknown location"

    def _derived_projection(self) -> Dict[str, Any]:
        return {"description": self.description, "county_code": self.county.code}
