"""
Sensor Pydantic schemas
"""

from pydantic import AliasChoices, BaseModel, Field
from typing import Optional
from datetime import datetime

class SensorDescriptor(BaseModel):
    """One entry of the ``sensors`` array of a box update.

    The three flags are independent on the wire:
    ``deleted`` removes the sensor, ``edited`` changes it and
    ``edited`` + ``new`` adds it to the box.
    A flag that is missing or ``null`` is unset. Strings such as ``"true"``
    and ``"false"`` are read as booleans, so ``"false"`` is unset too.
    """
    id: Optional[str] = Field(None, alias="_id", description="Sensor identifier")
    title: Optional[str] = None
    unit: Optional[str] = None
    sensor_type: Optional[str] = Field(None, alias="sensorType")
    status: Optional[str] = None
    icon: Optional[str] = None
    deleted: Optional[bool] = None
    edited: Optional[bool] = None
    new: Optional[bool] = None

    class Config:
        populate_by_name = True

class SensorDefinition(BaseModel):
    """Sensor submitted together with a new box"""
    id: Optional[str] = Field(None, validation_alias=AliasChoices("_id", "id"), description="Generated when absent")
    title: str = Field(..., min_length=1)
    unit: str
    sensor_type: str = Field(..., validation_alias=AliasChoices("sensorType", "sensor_type"), min_length=1)
    icon: Optional[str] = None

class LastMeasurement(BaseModel):
    """Newest measurement of a sensor"""
    value: Optional[float] = None
    created_at: datetime

class SensorResponse(BaseModel):
    """Schema for sensor response"""
    id: str
    title: str
    unit: str
    sensor_type: str
    status: Optional[str] = None
    icon: Optional[str] = None
    updated_at: Optional[datetime] = None
    last_measurement: Optional[LastMeasurement] = None

    class Config:
        from_attributes = True
