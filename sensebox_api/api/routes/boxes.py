"""
Box management endpoints
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.engine import Engine
from typing import List, Optional
import structlog

from sensebox_api.database.connection import get_engine
from sensebox_api.schemas.device import BoxResponse, DeviceCreate, DeviceUpdate, Exposure
from sensebox_api.services.boxes import DevicePatch, create_box, delete_box, get_box, list_boxes, update_box

logger = structlog.get_logger(__name__)
router = APIRouter()

@router.post("/boxes", status_code=201)
def post_new_box(box_data: DeviceCreate, engine: Engine = Depends(get_engine)):
    """Create a new box with its sensors"""
    box_id = create_box(engine, box_data, box_data.sensors)
    return {"message": "Box successfully created", "data": box_id}

@router.get("/boxes")
def get_boxes(
    name: Optional[str] = Query(None),
    model: Optional[List[str]] = Query(None),
    exposure: Optional[List[Exposure]] = Query(None),
    phenomenon: Optional[str] = Query(None),
    limit: int = Query(5, ge=1, le=20),
    minimal: bool = Query(False),
    full: bool = Query(False),
    engine: Engine = Depends(get_engine)
):
    """Find boxes by name, model, exposure or phenomenon"""
    return list_boxes(
        engine,
        name=name,
        models=model or (),
        exposures=exposure or (),
        phenomenon=phenomenon,
        limit=limit,
        minimal=minimal,
        full=full,
    )

@router.get("/boxes/{box_id}", response_model=BoxResponse)
def get_single_box(box_id: str, engine: Engine = Depends(get_engine)):
    """Get a specific box with its sensors"""
    return get_box(engine, box_id)

@router.put("/boxes/{box_id}")
def put_box(box_id: str, box_data: DeviceUpdate, engine: Engine = Depends(get_engine)):
    """Update a box.

    Sensors are changed through the ``sensors`` array: ``deleted`` removes a
    sensor, ``edited`` updates it and ``edited`` + ``new`` adds it.
    """
    box = update_box(engine, box_id, DevicePatch.from_update(box_data), box_data.sensors)
    return {"code": "Ok", "data": box}

@router.delete("/boxes/{box_id}")
def remove_box(box_id: str, engine: Engine = Depends(get_engine)):
    """Delete a box, its sensors and all their measurements"""
    name = delete_box(engine, box_id)
    return {
        "code": "Ok",
        "message": "box and all associated measurements marked for deletion",
        "data": {"name": name},
    }
