"""
Box operations: read, list, update, create and delete a box together with its sensors

Every mutation runs in a single transaction. A box update and all sensor
changes it carries either persist together or not at all.
"""

import uuid
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
import structlog

from sensebox_api.core.config import settings
from sensebox_api.core.errors import NotFoundError, ValidationError
from sensebox_api.database.connection import transaction
from sensebox_api.schemas.device import BoxResponse, BoxSummary, DeviceCreate, DeviceUpdate
from sensebox_api.schemas.sensor import LastMeasurement, SensorDefinition, SensorDescriptor, SensorResponse
from sensebox_api.services.sensor_changes import SensorCreate, classify_batch, generate_id
from sensebox_api.services.sensor_reconciler import apply_sensor_changes
from sensebox_api.services.statements import CLEAR, build_delete, build_insert, build_update, param_name, quote

logger = structlog.get_logger(__name__)

DEVICE_TABLE = "Device"

BOX_COLUMNS = (
    '"id" AS id, "name" AS name, "description" AS description, "exposure" AS exposure, '
    '"model" AS model, "status" AS status, "useAuth" AS use_auth, "public" AS public, '
    '"latitude" AS latitude, "longitude" AS longitude, "userId" AS user_id, '
    '"createdAt" AS created_at, "updatedAt" AS updated_at'
)

MINIMAL_BOX_COLUMNS = (
    '"id" AS id, "name" AS name, "exposure" AS exposure, '
    '"latitude" AS latitude, "longitude" AS longitude, "updatedAt" AS updated_at'
)

SELECT_BOX = text(f'SELECT {BOX_COLUMNS} FROM "Device" WHERE "id" = :p1')

# sensors of one box, each with its newest measurement
SELECT_SENSORS = text(
    'SELECT "id" AS id, "title" AS title, "unit" AS unit, "sensorType" AS sensor_type, '
    '"status" AS status, "icon" AS icon, "updatedAt" AS updated_at, '
    '(SELECT m."value" FROM "Measurement" m WHERE m."sensorId" = "Sensor"."id" '
    'ORDER BY m."time" DESC LIMIT 1) AS last_value, '
    '(SELECT m."time" FROM "Measurement" m WHERE m."sensorId" = "Sensor"."id" '
    'ORDER BY m."time" DESC LIMIT 1) AS last_measured_at '
    'FROM "Sensor" WHERE "deviceId" = :p1 ORDER BY "id"'
)

MAX_LIST_LIMIT = 20


@dataclass
class DevicePatch:
    """Sparse set of device columns; ``None`` leaves a column untouched"""

    name: Optional[str] = None
    description: Any = None
    exposure: Optional[str] = None
    model: Optional[str] = None
    status: Optional[str] = None
    use_auth: Optional[bool] = None
    public: Optional[bool] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    user_id: Optional[str] = None

    @classmethod
    def from_update(cls, update: DeviceUpdate) -> "DevicePatch":
        data = update.model_dump(exclude_unset=True, exclude={"sensors", "location"})
        if data.get("description") == "":
            data["description"] = CLEAR
        if update.location is not None:
            data["latitude"] = update.location.lat
            data["longitude"] = update.location.lng
        return cls(**data)

    def assignments(self) -> Tuple[Tuple[str, Any], ...]:
        """Device columns in statement order"""
        return (
            ("name", self.name),
            ("description", self.description),
            ("exposure", self.exposure),
            ("model", self.model),
            ("status", self.status),
            ("useAuth", self.use_auth),
            ("public", self.public),
            ("latitude", self.latitude),
            ("longitude", self.longitude),
            ("userId", self.user_id),
        )


def _sensor_response(row) -> SensorResponse:
    data = dict(row)
    value = data.pop("last_value")
    measured_at = data.pop("last_measured_at")
    if measured_at is not None:
        data["last_measurement"] = LastMeasurement(value=value, created_at=measured_at)
    return SensorResponse(**data)


def _read_sensors(conn: Connection, box_id: str) -> List[SensorResponse]:
    rows = conn.execute(SELECT_SENSORS, {"p1": box_id}).mappings().all()
    return [_sensor_response(row) for row in rows]


def _read_box(conn: Connection, box_id: str) -> BoxResponse:
    row = conn.execute(SELECT_BOX, {"p1": box_id}).mappings().first()
    if row is None:
        raise NotFoundError(f"Box {box_id} not found", detail=box_id)
    return BoxResponse(**dict(row), sensors=_read_sensors(conn, box_id))


def get_box(bind: Engine, box_id: str) -> BoxResponse:
    """Current state of a box and its sensors"""
    with bind.connect() as conn:
        return _read_box(conn, box_id)


def list_boxes(
    bind: Engine,
    name: Optional[str] = None,
    models: Sequence[str] = (),
    exposures: Sequence[str] = (),
    phenomenon: Optional[str] = None,
    limit: int = 5,
    minimal: bool = False,
    full: bool = False,
) -> List[Union[BoxSummary, BoxResponse]]:
    """Find boxes, ordered by name.

    Filters combine with AND; ``models`` and ``exposures`` match any of the
    given values and ``phenomenon`` matches boxes with a sensor of that
    title. ``minimal`` returns only the columns needed to place a box on a
    map. ``full`` adds the sensors with their newest measurement and is
    ignored together with ``minimal``.
    """
    if not 1 <= limit <= MAX_LIST_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_LIST_LIMIT}", detail=str(limit))

    params = {}

    def bind_value(value) -> str:
        key = param_name(len(params) + 1)
        params[key] = value
        return f":{key}"

    conditions = []
    if name:
        conditions.append(f"{quote('name')} = {bind_value(name)}")
    if models:
        conditions.append(f"{quote('model')} IN ({', '.join(bind_value(m) for m in models)})")
    if exposures:
        conditions.append(f"{quote('exposure')} IN ({', '.join(bind_value(e) for e in exposures)})")
    if phenomenon:
        conditions.append(
            'EXISTS (SELECT 1 FROM "Sensor" s WHERE s."deviceId" = "Device"."id" '
            f'AND s."title" = {bind_value(phenomenon)})'
        )

    sql = f'SELECT {MINIMAL_BOX_COLUMNS if minimal else BOX_COLUMNS} FROM "Device"'
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += f' ORDER BY "name", "id" LIMIT {bind_value(limit)}'

    with bind.connect() as conn:
        rows = conn.execute(text(sql), params).mappings().all()
        if minimal:
            boxes = [BoxSummary(**dict(row)) for row in rows]
        elif full:
            boxes = [BoxResponse(**dict(row), sensors=_read_sensors(conn, row["id"])) for row in rows]
        else:
            boxes = [BoxResponse(**dict(row)) for row in rows]

    logger.debug("Boxes listed", count=len(boxes), filters=len(conditions), minimal=minimal, full=full)
    return boxes


def update_box(
    bind: Engine,
    box_id: str,
    patch: DevicePatch,
    sensors: Sequence[SensorDescriptor] = (),
) -> BoxResponse:
    """Apply a sparse device update and a sensor batch atomically.

    The sensor batch is classified before the transaction starts, so an
    invalid descriptor fails without touching the database. The returned
    box is read back inside the same transaction.
    """
    changes = classify_batch(sensors)
    statement = build_update(
        DEVICE_TABLE,
        patch.assignments(),
        where=(("id", box_id),),
        touch=("updatedAt",),
    )

    with transaction(bind) as conn:
        if statement is not None:
            result = conn.execute(statement.text(), statement.params)
            if result.rowcount == 0:
                raise NotFoundError(f"Box {box_id} not found", detail=box_id)
        else:
            # nothing to write, the box must still exist
            _read_box(conn, box_id)

        apply_sensor_changes(conn, box_id, changes)
        box = _read_box(conn, box_id)

    logger.info(
        "Box updated",
        box_id=box_id,
        device_written=statement is not None,
        sensor_changes=len(changes),
    )
    return box


def create_box(bind: Engine, spec: DeviceCreate, sensors: Sequence[SensorDefinition] = ()) -> str:
    """Insert a new box and its sensors; returns the new box id"""
    box_id = str(uuid.uuid4())
    statement = build_insert(
        DEVICE_TABLE,
        required=(
            ("id", box_id),
            ("name", spec.name),
            ("exposure", spec.exposure),
            ("useAuth", spec.use_auth),
            ("public", spec.public),
            ("status", spec.status or settings.default_box_status),
            ("latitude", spec.location.lat),
            ("longitude", spec.location.lng),
            ("userId", spec.user_id),
        ),
        optional=(
            ("description", spec.description or None),
            ("model", spec.model or None),
        ),
        touch=("updatedAt",),
    )
    creates = [
        SensorCreate(
            sensor_id=definition.id or generate_id(),
            title=definition.title,
            unit=definition.unit,
            sensor_type=definition.sensor_type,
            icon=definition.icon,
        )
        for definition in sensors
    ]

    with transaction(bind) as conn:
        conn.execute(statement.text(), statement.params)
        apply_sensor_changes(conn, box_id, creates)

    logger.info("Box created", box_id=box_id, name=spec.name, sensors=len(creates))
    return box_id


def delete_box(bind: Engine, box_id: str) -> str:
    """Delete a box; its sensors and measurements are removed by cascade.

    Returns the name of the deleted box.
    """
    statement = build_delete(DEVICE_TABLE, where=(("id", box_id),), returning=("name",))
    with transaction(bind) as conn:
        name = conn.execute(statement.text(), statement.params).scalar()
        if name is None:
            raise NotFoundError(f"Box {box_id} not found", detail=box_id)

    logger.info("Box deleted", box_id=box_id, name=name)
    return name
