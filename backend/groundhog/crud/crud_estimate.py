from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from groundhog.models.chemical_estimate import ChemicalEstimate


class CRUDEstimate:
    def create(self, db: Session, farm_id: str, obj_in: dict) -> ChemicalEstimate:
        db_obj = ChemicalEstimate(farm_id=farm_id, **obj_in)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_latest(self, db: Session, farm_id: str) -> Optional[ChemicalEstimate]:
        result = db.execute(
            select(ChemicalEstimate)
            .where(ChemicalEstimate.farm_id == farm_id)
            .order_by(desc(ChemicalEstimate.created_at), desc(ChemicalEstimate.id))
            .limit(1)
        )
        return result.scalar_one_or_none()

    def get_history(self, db: Session, farm_id: str, limit: int = 20) -> List[ChemicalEstimate]:
        result = db.execute(
            select(ChemicalEstimate)
            .where(ChemicalEstimate.farm_id == farm_id)
            .order_by(desc(ChemicalEstimate.created_at), desc(ChemicalEstimate.id))
            .limit(limit)
        )
        return list(result.scalars().all())


estimate_crud = CRUDEstimate()
