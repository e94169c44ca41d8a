"""
Device model for senseBoxes
"""

from sqlalchemy import Column, String, Boolean, DateTime, Float, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from sensebox_api.database.connection import Base

class Device(Base):
    """Device model representing a senseBox"""

    __tablename__ = "Device"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    exposure = Column(String(20), nullable=False)  # indoor, outdoor, mobile, unknown
    model = Column(String(100))
    status = Column(String(20), nullable=False, default="INACTIVE", server_default="INACTIVE")
    use_auth = Column("useAuth", Boolean, nullable=False, default=False)
    public = Column(Boolean, nullable=False, default=False)
    latitude = Column(Float)
    longitude = Column(Float)
    user_id = Column("userId", String(64), index=True)
    created_at = Column("createdAt", DateTime(timezone=True), server_default=func.now())
    updated_at = Column("updatedAt", DateTime(timezone=True), server_default=func.now())

    # Relationships
    sensors = relationship("Sensor", back_populates="device", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Device(id={self.id}, name={self.name}, status={self.status})>"
