from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.sql import func

from groundhog.core.database import Base


class SensorPoint(Base):
    __tablename__ = "rover_points"

    id = Column(Integer, primary_key=True, index=True)
    farm_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    lat = Column(Float, nullable=False)
    long = Column(Float, nullable=False)
    moisture = Column(Float, nullable=True)  # percent
    temperature = Column(Float, nullable=True)  # Celsius
    ph = Column(Float, nullable=True)
    ec = Column(Float, nullable=True)

    def __repr__(self):
        return f"<SensorPoint(id={self.id}, farm={self.farm_id}, lat={self.lat}, long={self.long})>"
