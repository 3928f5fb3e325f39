"""Pydantic models for API requests and responses."""
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional, Union
from datetime import datetime

from .errors import InvalidRequest

# TAGO passes identifiers either as strings (XML) or numbers (JSON)
Scalar = Union[int, float, str]


class LocationQuery(BaseModel):
    """Query for the buses currently running on a route."""
    city_code: str = Field(..., min_length=1, description="TAGO city code, e.g. '37010'")
    route_id: str = Field(..., min_length=1, description="TAGO route id, e.g. 'PHB350000389'")

    @classmethod
    def from_params(cls, city_code: Optional[str], route_id: Optional[str]) -> "LocationQuery":
        """Build a query from raw request parameters, rejecting blank values."""
        city_code = (city_code or "").strip()
        route_id = (route_id or "").strip()
        if not city_code or not route_id:
            raise InvalidRequest()
        return cls(city_code=city_code, route_id=route_id)


class LocationRecord(BaseModel):
    """Normalized position of one bus."""
    lat: float
    lng: float
    routenm: Optional[str] = Field(None, description="Route name")
    vehicleno: Optional[str] = Field(None, description="Vehicle plate number")
    nodenm: Optional[str] = Field(None, description="Name of the nearest stop")
    nodeid: Optional[Scalar] = None
    nodeord: Optional[Scalar] = None
    routetp: Optional[Scalar] = None


class City(BaseModel):
    """City code entry from the TAGO city listing."""
    citycode: Optional[Scalar] = None
    cityname: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error body returned for failed requests."""
    error: str
    status: Optional[int] = Field(None, description="Upstream HTTP status, when known")
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    upstream_format: str
    credential_configured: bool
    timestamp: datetime = Field(default_factory=datetime.now)


def as_text(value: Any) -> Optional[str]:
    """Render a TAGO scalar as a string, keeping None."""
    if value is None:
        return None
    return str(value)


def location_from_item(item: Dict[str, Any], lat: float, lng: float) -> LocationRecord:
    """Map a raw TAGO bus item onto a LocationRecord."""
    return LocationRecord(
        lat=lat,
        lng=lng,
        routenm=as_text(item.get("routenm")),
        vehicleno=as_text(item.get("vehicleno")),
        nodenm=as_text(item.get("nodenm")),
        nodeid=item.get("nodeid"),
        nodeord=item.get("nodeord"),
        routetp=item.get("routetp"),
    )


def city_from_item(item: Dict[str, Any]) -> City:
    return City(citycode=item.get("citycode"), cityname=as_text(item.get("cityname")))
