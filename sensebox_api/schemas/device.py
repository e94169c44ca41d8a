"""
Device (box) Pydantic schemas
"""

from pydantic import BaseModel, Field, model_validator
from typing import List, Literal, Optional
from datetime import datetime

from sensebox_api.schemas.sensor import SensorDefinition, SensorDescriptor, SensorResponse

Exposure = Literal["indoor", "outdoor", "mobile", "unknown"]
BoxStatus = Literal["ACTIVE", "INACTIVE", "OLD"]

class Location(BaseModel):
    """Current location of a box, in decimal degrees"""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    @model_validator(mode="before")
    @classmethod
    def from_coordinates(cls, value):
        # [lng, lat] as in GeoJSON
        if isinstance(value, (list, tuple)):
            if len(value) < 2:
                raise ValueError("location needs longitude and latitude")
            return {"lng": value[0], "lat": value[1]}
        return value

class DeviceCreate(BaseModel):
    """Schema for creating a box"""
    name: str = Field(..., min_length=1, description="Box name")
    exposure: Exposure
    location: Location
    user_id: str = Field(..., description="Owning user")
    description: Optional[str] = None
    model: Optional[str] = None
    status: Optional[BoxStatus] = None
    use_auth: bool = Field(False, alias="useAuth")
    public: bool = False
    sensors: List[SensorDefinition] = []

    class Config:
        populate_by_name = True

class DeviceUpdate(BaseModel):
    """Schema for updating a box; every field is optional"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, description="Send '' to remove the description")
    exposure: Optional[Exposure] = None
    model: Optional[str] = None
    status: Optional[BoxStatus] = None
    use_auth: Optional[bool] = Field(None, alias="useAuth")
    public: Optional[bool] = None
    location: Optional[Location] = None
    user_id: Optional[str] = None
    sensors: List[SensorDescriptor] = []

    class Config:
        populate_by_name = True

class BoxResponse(BaseModel):
    """Schema for box response"""
    id: str
    name: str
    description: Optional[str] = None
    exposure: str
    model: Optional[str] = None
    status: str
    use_auth: bool
    public: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    sensors: List[SensorResponse] = []

    class Config:
        from_attributes = True

class BoxSummary(BaseModel):
    """Minimal box view used to place boxes on a map"""
    id: str
    name: str
    exposure: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    updated_at: Optional[datetime] = None
