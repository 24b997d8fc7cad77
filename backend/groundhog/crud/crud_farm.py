import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from groundhog.core.session import slugify_farm_name
from groundhog.models.farm import Farm

logger = logging.getLogger(__name__)


class CRUDFarm:
    def get_by_farm_id(self, db: Session, farm_id: str) -> Optional[Farm]:
        result = db.execute(select(Farm).where(Farm.farm_id == farm_id))
        return result.scalar_one_or_none()

    def create(self, db: Session, obj_in: dict) -> Farm:
        farm_id = slugify_farm_name(obj_in["farm_name"])
        db_obj = Farm(farm_id=farm_id, **obj_in)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        logger.info(f"Farm onboarded: {farm_id}")
        return db_obj


farm_crud = CRUDFarm()
