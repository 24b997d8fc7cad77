from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.sql import func

from groundhog.core.database import Base


class ChemicalEstimate(Base):
    __tablename__ = "chemical_estimates"

    id = Column(Integer, primary_key=True, index=True)
    farm_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    nitrogen = Column(Integer, nullable=False)
    phosphorus = Column(Integer, nullable=False)
    potassium = Column(Integer, nullable=False)
    ec = Column(Float, nullable=False)
    sulphur = Column(Integer, nullable=False)
    ph = Column(Float, nullable=False)
    zinc = Column(Integer, nullable=False)
    iron = Column(Integer, nullable=False)
    boron = Column(Integer, nullable=False)
    copper = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<ChemicalEstimate(id={self.id}, farm={self.farm_id}, N={self.nitrogen})>"
