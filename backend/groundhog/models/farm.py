from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.sql import func

from groundhog.core.database import Base


class Farm(Base):
    __tablename__ = "farm_data"

    id = Column(Integer, primary_key=True, index=True)
    farm_id = Column(String, unique=True, index=True, nullable=False)
    farm_name = Column(String, nullable=False)
    farmer_name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    lat = Column(Float, nullable=False)
    long = Column(Float, nullable=False)

    def __repr__(self) -> str:
        return f"<Farm(farm_id={self.farm_id}, name={self.farm_name})>"
