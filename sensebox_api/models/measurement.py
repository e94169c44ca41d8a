"""
Measurement model, rows are removed together with their sensor
"""

from sqlalchemy import Column, String, DateTime, Float, ForeignKey
from sqlalchemy.orm import relationship
from sensebox_api.database.connection import Base

class Measurement(Base):
    """Single sensor reading"""

    __tablename__ = "Measurement"

    sensor_id = Column("sensorId", String(64), ForeignKey("Sensor.id", ondelete="CASCADE"), primary_key=True)
    time = Column(DateTime(timezone=True), primary_key=True)
    value = Column(Float)

    # Relationship
    sensor = relationship("Sensor", back_populates="measurements")

    def __repr__(self):
        return f"<Measurement(sensor_id={self.sensor_id}, time={self.time}, value={self.value})>"
