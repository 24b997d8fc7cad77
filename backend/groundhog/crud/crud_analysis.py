from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from groundhog.models.ai_analysis import AIAnalysis


class CRUDAnalysis:
    def create(
        self,
        db: Session,
        farm_id: str,
        input_data: dict,
        output_data: dict,
        is_fallback: bool = False,
    ) -> AIAnalysis:
        db_obj = AIAnalysis(
            farm_id=farm_id,
            input_data=input_data,
            output_data=output_data,
            last_updated=datetime.now(timezone.utc),
            is_fallback=is_fallback,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_latest(self, db: Session, farm_id: str) -> Optional[AIAnalysis]:
        result = db.execute(
            select(AIAnalysis)
            .where(AIAnalysis.farm_id == farm_id)
            .order_by(desc(AIAnalysis.created_at), desc(AIAnalysis.id))
            .limit(1)
        )
        return result.scalar_one_or_none()


analysis_crud = CRUDAnalysis()
