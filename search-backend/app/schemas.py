from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.crs.sweref_catalog import EPSG_TO_PROJECTION

Preference = Literal["auto", "tm", "zone"]


class TextRequest(BaseModel):
    """Raw user input as typed into the search box."""

    text: str = Field(description="Free text; sanitized server side")

    model_config = ConfigDict(json_schema_extra={"example": {"text": "E 674 032, N 6 580 822"}})


class SanitizeResponse(BaseModel):
    coordinate_text: str = Field(description="Coordinate sanitization (max 200 chars)")
    search_term: str = Field(description="Generic search-term sanitization (max 256 chars)")
    suggestable: bool = Field(description="Search term long enough for suggestions")


class ClassifyResponse(BaseModel):
    is_coordinate: bool
    confidence: Literal["high", "medium", "low"]
    reason: str


class ParseResponse(BaseModel):
    success: bool
    easting: Optional[float] = None
    northing: Optional[float] = None
    format: Optional[str] = None
    sanitized: Optional[str] = None
    warning: Optional[str] = None
    error: Optional[str] = None


class BoundsModel(BaseModel):
    e_min: float
    e_max: float
    n_min: float
    n_max: float


class ProjectionModel(BaseModel):
    id: str
    epsg: int
    code: str
    name: str
    kind: Literal["tm", "zone"]
    central_meridian: float
    scale_factor: float
    false_easting: float
    false_northing: float
    bounds: BoundsModel
    zone_id: Optional[str] = None


class ProjectionListResponse(BaseModel):
    projections: List[ProjectionModel] = Field(default_factory=list)


class DetectRequest(BaseModel):
    easting: float
    northing: float
    center_longitude: Optional[float] = Field(default=None, description="Map view center longitude")
    preference: Preference = "auto"


class DetectResponse(BaseModel):
    projection: Optional[ProjectionModel] = None
    confidence: float = Field(ge=0.0, le=1.0)
    alternatives: List[ProjectionModel] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


def _check_sweref_epsg(v: Optional[int]) -> Optional[int]:
    if v is not None and v not in EPSG_TO_PROJECTION:
        raise ValueError(f"EPSG:{v} is not a SWEREF 99 projection")
    return v


class ValidateRequest(BaseModel):
    easting: float
    northing: float
    epsg: Optional[int] = Field(default=None, description="SWEREF 99 EPSG (3006-3018); global envelope if omitted")

    @field_validator("epsg")
    @classmethod
    def _validate_epsg(cls, v: Optional[int]) -> Optional[int]:
        return _check_sweref_epsg(v)


class ValidateResponse(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class TransformRequest(BaseModel):
    easting: float
    northing: float
    epsg: int = Field(description="Source SWEREF 99 EPSG (3006-3018)")
    target_wkid: Optional[int] = Field(default=None, gt=0, description="Map spatial reference")

    @field_validator("epsg")
    @classmethod
    def _validate_epsg(cls, v: int) -> int:
        _check_sweref_epsg(v)
        return v


class PointModel(BaseModel):
    x: float
    y: float
    spatial_reference: Optional[int] = None


class TransformResponse(BaseModel):
    point: PointModel
    cached: bool = False


class SearchRequest(BaseModel):
    text: str
    preference: Optional[Preference] = None
    center_longitude: Optional[float] = None
    target_wkid: Optional[int] = Field(default=None, gt=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"text": "6580822 674032", "preference": "auto", "center_longitude": 18.1, "target_wkid": 4326}
        }
    )


class SearchResponse(BaseModel):
    projection_id: str
    epsg: int
    easting: float
    northing: float
    confidence: float
    format: str
    warnings: List[str] = Field(default_factory=list)
    alternative_projection_ids: List[str] = Field(default_factory=list)
    map_point: Optional[PointModel] = None


class ErrorResponse(BaseModel):
    error: str
    warnings: List[str] = Field(default_factory=list)


__all__ = [
    "TextRequest",
    "SanitizeResponse",
    "ClassifyResponse",
    "ParseResponse",
    "BoundsModel",
    "ProjectionModel",
    "ProjectionListResponse",
    "DetectRequest",
    "DetectResponse",
    "ValidateRequest",
    "ValidateResponse",
    "TransformRequest",
    "PointModel",
    "TransformResponse",
    "SearchRequest",
    "SearchResponse",
    "ErrorResponse",
]
