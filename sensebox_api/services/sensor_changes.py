"""
Classification of sensor change descriptors

A box update carries one flat ``sensors`` array in which every entry sets
some of the ``deleted``/``edited``/``new`` flags. Each entry is turned into
exactly one of ``SensorCreate``, ``SensorUpdate`` or ``SensorDelete`` here,
before anything touches the database.

=======  ======  =====  =========
deleted  edited  new    operation
=======  ======  =====  =========
yes      any     any    delete
no       yes     yes    create
no       yes     no     update
no       no      any    rejected
=======  ======  =====  =========
"""

import uuid
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

import structlog

from sensebox_api.core.errors import ValidationError
from sensebox_api.schemas.sensor import SensorDescriptor

logger = structlog.get_logger(__name__)


def generate_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class SensorCreate:
    sensor_id: str
    title: str
    unit: str
    sensor_type: str
    status: Optional[str] = None
    icon: Optional[str] = None


@dataclass(frozen=True)
class SensorUpdate:
    sensor_id: str
    title: Optional[str] = None
    unit: Optional[str] = None
    sensor_type: Optional[str] = None
    status: Optional[str] = None
    icon: Optional[str] = None

    def fields(self) -> Tuple[Tuple[str, Any], ...]:
        """Updatable columns in statement order"""
        return (
            ("title", self.title),
            ("unit", self.unit),
            ("sensorType", self.sensor_type),
            ("status", self.status),
            ("icon", self.icon),
        )


@dataclass(frozen=True)
class SensorDelete:
    sensor_id: str


SensorChange = Union[SensorCreate, SensorUpdate, SensorDelete]


def _describe(descriptor: SensorDescriptor, position: int) -> str:
    if descriptor.id:
        return f"sensor {descriptor.id}"
    return f"sensor at position {position}"


def classify(descriptor: SensorDescriptor, position: int = 0) -> SensorChange:
    """Decide the single operation a descriptor asks for.

    Raises ``ValidationError`` for descriptors without a usable flag
    combination or without the fields their operation needs.
    """
    if descriptor.deleted:
        if not descriptor.id:
            raise ValidationError(f"Cannot delete {_describe(descriptor, position)}: missing _id")
        return SensorDelete(sensor_id=descriptor.id)

    if descriptor.edited and descriptor.new:
        missing = [
            name for name, value in (
                ("title", descriptor.title),
                ("unit", descriptor.unit),
                ("sensorType", descriptor.sensor_type),
            )
            if value is None or (name != "unit" and not value.strip())
        ]
        if missing:
            raise ValidationError(
                f"Cannot create {_describe(descriptor, position)}: missing {', '.join(missing)}"
            )
        return SensorCreate(
            sensor_id=descriptor.id or generate_id(),
            title=descriptor.title,
            unit=descriptor.unit,
            sensor_type=descriptor.sensor_type,
            status=descriptor.status,
            icon=descriptor.icon,
        )

    if descriptor.edited:
        if not descriptor.id:
            raise ValidationError(f"Cannot update {_describe(descriptor, position)}: missing _id")
        return SensorUpdate(
            sensor_id=descriptor.id,
            title=descriptor.title,
            unit=descriptor.unit,
            sensor_type=descriptor.sensor_type,
            status=descriptor.status,
            icon=descriptor.icon,
        )

    raise ValidationError(f"Invalid operation for {_describe(descriptor, position)}")


def classify_batch(descriptors: Sequence[SensorDescriptor]) -> List[SensorChange]:
    """Classify a whole batch; the first invalid descriptor aborts it"""
    changes = [classify(descriptor, position) for position, descriptor in enumerate(descriptors)]
    logger.debug("Sensor batch classified", count=len(changes))
    return changes
