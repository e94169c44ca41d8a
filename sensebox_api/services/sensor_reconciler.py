"""
Applies classified sensor changes to the database
"""

from typing import Dict, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Connection
import structlog

from sensebox_api.core.errors import NotFoundError
from sensebox_api.services.sensor_changes import SensorChange, SensorCreate, SensorDelete, SensorUpdate
from sensebox_api.services.statements import build_delete, build_insert, build_update

logger = structlog.get_logger(__name__)

SENSOR_TABLE = "Sensor"


def apply_sensor_changes(conn: Connection, box_id: str, changes: Sequence[SensorChange]) -> Dict[str, int]:
    """Apply every change in submission order on the caller's connection.

    Runs inside the caller's transaction. The first failing change raises and
    the remaining ones are never attempted. Update and delete are scoped to
    ``box_id``, so sensors of other boxes are reported as not found.
    """
    applied = {"created": 0, "updated": 0, "deleted": 0}

    for change in changes:
        if isinstance(change, SensorDelete):
            _delete_sensor(conn, box_id, change)
            applied["deleted"] += 1
        elif isinstance(change, SensorCreate):
            _create_sensor(conn, box_id, change)
            applied["created"] += 1
        elif isinstance(change, SensorUpdate):
            _update_sensor(conn, box_id, change)
            applied["updated"] += 1
        else:
            raise TypeError(f"Unsupported sensor change {change!r}")

    if changes:
        logger.info("Sensor changes applied", box_id=box_id, **applied)
    return applied


def _delete_sensor(conn: Connection, box_id: str, change: SensorDelete):
    # Measurements of the sensor go with it (ON DELETE CASCADE)
    statement = build_delete(SENSOR_TABLE, where=(("id", change.sensor_id), ("deviceId", box_id)))
    result = conn.execute(statement.text(), statement.params)
    if result.rowcount == 0:
        raise NotFoundError(f"Sensor {change.sensor_id} not found", detail=change.sensor_id)
    logger.debug("Sensor deleted", box_id=box_id, sensor_id=change.sensor_id)


def _create_sensor(conn: Connection, box_id: str, change: SensorCreate):
    statement = build_insert(
        SENSOR_TABLE,
        required=(
            ("id", change.sensor_id),
            ("title", change.title),
            ("unit", change.unit),
            ("sensorType", change.sensor_type),
            ("deviceId", box_id),
        ),
        optional=(
            ("status", change.status),
            ("icon", change.icon),
        ),
        touch=("updatedAt",),
    )
    conn.execute(statement.text(), statement.params)
    logger.debug("Sensor created", box_id=box_id, sensor_id=change.sensor_id)


def _update_sensor(conn: Connection, box_id: str, change: SensorUpdate):
    statement = build_update(
        SENSOR_TABLE,
        change.fields(),
        where=(("id", change.sensor_id), ("deviceId", box_id)),
        touch=("updatedAt",),
    )
    if statement is None:
        # Nothing to write, the sensor must still exist
        found = conn.execute(
            text('SELECT 1 FROM "Sensor" WHERE "id" = :p1 AND "deviceId" = :p2'),
            {"p1": change.sensor_id, "p2": box_id},
        ).first()
        if found is None:
            raise NotFoundError(f"Sensor {change.sensor_id} not found", detail=change.sensor_id)
        return

    result = conn.execute(statement.text(), statement.params)
    if result.rowcount == 0:
        raise NotFoundError(f"Sensor {change.sensor_id} not found", detail=change.sensor_id)
    logger.debug("Sensor updated", box_id=box_id, sensor_id=change.sensor_id)
