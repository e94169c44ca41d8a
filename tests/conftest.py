import os
import sys
from datetime import datetime, timezone

import pytest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("DATABASE_URL", "sqlite://")

from sqlalchemy import event, text
from sqlalchemy.orm import sessionmaker

from sensebox_api.database.connection import create_database_engine, init_database
from sensebox_api.models import Device, Measurement, Sensor


class DatabaseInspector:
    """Reads rows straight from the tables and records executed SQL"""

    def __init__(self, engine):
        self.engine = engine
        self.statements = []
        event.listen(engine, "before_cursor_execute", self._record)

    def _record(self, conn, cursor, statement, parameters, context, executemany):
        self.statements.append(statement)

    @property
    def writes(self):
        return [
            statement for statement in self.statements
            if statement.lstrip().split(None, 1)[0].upper() in ("INSERT", "UPDATE", "DELETE")
        ]

    def device(self, box_id):
        with self.engine.connect() as conn:
            row = conn.execute(text('SELECT * FROM "Device" WHERE "id" = :id'), {"id": box_id}).mappings().first()
        return dict(row) if row is not None else None

    def sensors(self, box_id):
        with self.engine.connect() as conn:
            rows = conn.execute(text('SELECT * FROM "Sensor" WHERE "deviceId" = :id'), {"id": box_id}).mappings().all()
        return {row["id"]: dict(row) for row in rows}

    def count(self, table):
        with self.engine.connect() as conn:
            return conn.execute(text(f'SELECT COUNT(*) FROM "{table}"')).scalar()


@pytest.fixture
def db_engine():
    """Empty in-memory database with all tables"""
    engine = create_database_engine("sqlite://")
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seeded_engine(db_engine):
    """Two boxes: box-1 with sensors s1/s2 (s2 has measurements), box-2 with s9"""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    session.add_all([
        Device(
            id="box-1", name="Old Name", description="Balcony", exposure="outdoor",
            model="homeV2Wifi", status="ACTIVE", use_auth=False, public=True,
            latitude=51.96, longitude=7.61, user_id="user-1",
        ),
        Device(
            id="box-2", name="Other Box", exposure="indoor", status="INACTIVE",
            use_auth=True, public=False, latitude=52.52, longitude=13.40, user_id="user-2",
        ),
    ])
    session.flush()
    session.add_all([
        Sensor(id="s1", device_id="box-1", title="Temperatur", unit="°C", sensor_type="HDC1080", icon="osem-thermometer"),
        Sensor(id="s2", device_id="box-1", title="PM10", unit="µg/m³", sensor_type="SDS 011"),
        Sensor(id="s9", device_id="box-2", title="CO2", unit="ppm", sensor_type="SCD30"),
    ])
    session.flush()
    session.add_all([
        Measurement(sensor_id="s2", time=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc), value=12.5),
        Measurement(sensor_id="s2", time=datetime(2024, 1, 1, 12, 5, tzinfo=timezone.utc), value=13.0),
        Measurement(sensor_id="s1", time=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc), value=21.3),
    ])
    session.commit()
    session.close()
    return db_engine


@pytest.fixture
def inspector(seeded_engine):
    return DatabaseInspector(seeded_engine)


@pytest.fixture
def empty_inspector(db_engine):
    return DatabaseInspector(db_engine)
