from datetime import date, datetime, time
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from groundhog.models.sensor_point import SensorPoint


def day_bounds(day: date) -> tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


class CRUDSensor:
    def create(self, db: Session, farm_id: str, obj_in: dict) -> SensorPoint:
        db_obj = SensorPoint(farm_id=farm_id, **obj_in)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_multi(
        self,
        db: Session,
        farm_id: str,
        limit: Optional[int] = 100,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[SensorPoint]:
        query = (
            select(SensorPoint)
            .where(SensorPoint.farm_id == farm_id)
            .order_by(desc(SensorPoint.created_at), desc(SensorPoint.id))
        )

        if start_time:
            query = query.where(SensorPoint.created_at >= start_time)
        if end_time:
            query = query.where(SensorPoint.created_at <= end_time)
        if limit:
            query = query.limit(limit)

        return list(db.execute(query).scalars().all())

    def get_for_day(self, db: Session, farm_id: str, day: date) -> List[SensorPoint]:
        start_time, end_time = day_bounds(day)
        return self.get_multi(db, farm_id, limit=None, start_time=start_time, end_time=end_time)

    def get_recent(self, db: Session, farm_id: str, limit: int = 10) -> List[SensorPoint]:
        return self.get_multi(db, farm_id, limit=limit)

    def get_available_dates(self, db: Session, farm_id: str) -> List[date]:
        result = db.execute(
            select(SensorPoint.created_at)
            .where(SensorPoint.farm_id == farm_id)
            .order_by(desc(SensorPoint.created_at))
        )
        dates: List[date] = []
        for created_at in result.scalars():
            day = created_at.date()
            if day not in dates:
                dates.append(day)
        return dates


sensor_crud = CRUDSensor()
