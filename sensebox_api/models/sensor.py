"""
Sensor model, one measurement channel of a senseBox
"""

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from sensebox_api.database.connection import Base

class Sensor(Base):
    """Sensor belonging to exactly one device"""

    __tablename__ = "Sensor"

    id = Column(String(64), primary_key=True)
    device_id = Column("deviceId", String(64), ForeignKey("Device.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    unit = Column(String(50), nullable=False)
    sensor_type = Column("sensorType", String(100), nullable=False)
    status = Column(String(20))
    icon = Column(String(100))
    updated_at = Column("updatedAt", DateTime(timezone=True), server_default=func.now())

    # Relationships
    device = relationship("Device", back_populates="sensors")
    measurements = relationship("Measurement", back_populates="sensor", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Sensor(id={self.id}, device_id={self.device_id}, title={self.title})>"
