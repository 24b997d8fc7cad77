from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from groundhog.core.database import Base


class AIAnalysis(Base):
    __tablename__ = "ai_analysis"

    id = Column(Integer, primary_key=True, index=True)
    farm_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    input_data = Column(JSON, nullable=False)
    output_data = Column(JSON, nullable=False)
    last_updated = Column(DateTime(timezone=True), nullable=False)
    # True when output_data is the canned response used after a model failure
    is_fallback = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<AIAnalysis(id={self.id}, farm={self.farm_id}, fallback={self.is_fallback})>"
