#!/usr/bin/env python3
"""
Initialize the database with sample boxes
"""

import sys
import os
from datetime import datetime, timedelta, timezone
import random

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sqlalchemy.orm import sessionmaker

from sensebox_api.database.connection import init_database, engine
from sensebox_api.models.device import Device
from sensebox_api.models.measurement import Measurement
from sensebox_api.schemas.device import DeviceCreate
from sensebox_api.services.boxes import create_box

SAMPLE_BOXES = [
    {
        "name": "Schlossplatz",
        "exposure": "outdoor",
        "location": {"lat": 51.9636, "lng": 7.6129},
        "user_id": "sample-user",
        "model": "homeV2Wifi",
        "description": "Rooftop station next to the castle",
        "sensors": [
            {"title": "Temperatur", "unit": "°C", "sensorType": "HDC1080"},
            {"title": "rel. Luftfeuchte", "unit": "%", "sensorType": "HDC1080"},
            {"title": "PM10", "unit": "µg/m³", "sensorType": "SDS 011"},
        ],
    },
    {
        "name": "Wohnzimmer",
        "exposure": "indoor",
        "location": {"lat": 52.5200, "lng": 13.4050},
        "user_id": "sample-user",
        "sensors": [
            {"title": "CO2", "unit": "ppm", "sensorType": "SCD30"},
        ],
    },
    {
        "name": "Lastenrad",
        "exposure": "mobile",
        "location": [9.9937, 53.5511],
        "user_id": "sample-user",
        "sensors": [],
    },
]

def create_sample_data():
    """Create sample data for testing"""

    # Initialize database
    init_database()

    Session = sessionmaker(bind=engine)
    session = Session()

    try:
        existing = {name for (name,) in session.query(Device.name).all()}
        for box_data in SAMPLE_BOXES:
            if box_data["name"] in existing:
                continue
            box = DeviceCreate(**box_data)
            box_id = create_box(engine, box, box.sensors)
            print(f"✅ Box {box_data['name']} created: {box_id}")

        # Create sample measurements for the last 24 hours (every 10 minutes)
        now = datetime.now(timezone.utc)
        for device in session.query(Device).all():
            for sensor in device.sensors:
                if sensor.measurements:
                    continue
                for i in range(144):
                    session.add(Measurement(
                        sensor_id=sensor.id,
                        time=now - timedelta(minutes=i * 10),
                        value=round(random.uniform(0, 40), 2),
                    ))

        session.commit()
        print("✅ Sample measurements created")

        print("\n🎉 Database initialization complete!")

    except Exception as e:
        print(f"❌ Error initializing database: {e}")
        session.rollback()
        raise
    finally:
        session.close()

if __name__ == "__main__":
    create_sample_data()
