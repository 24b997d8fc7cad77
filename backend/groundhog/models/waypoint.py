import uuid

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from groundhog.core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class WaypointPath(Base):
    __tablename__ = "waypoint_paths"

    id = Column(String, primary_key=True, default=_new_id)
    farm_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    is_active = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    waypoints = relationship("Waypoint", order_by="Waypoint.order_index", lazy="selectin")

    def __repr__(self) -> str:
        return f"<WaypointPath(id={self.id}, name={self.name}, active={self.is_active})>"


class Waypoint(Base):
    __tablename__ = "waypoints"

    id = Column(String, primary_key=True, default=_new_id)
    path_id = Column(String, ForeignKey("waypoint_paths.id"), nullable=False, index=True)
    farm_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    lat = Column(Float, nullable=False)
    long = Column(Float, nullable=False)
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Waypoint(name={self.name}, order={self.order_index})>"
