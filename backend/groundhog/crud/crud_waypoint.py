from typing import List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.orm import Session

from groundhog.models.waypoint import Waypoint, WaypointPath


class CRUDWaypoint:
    def get_paths(self, db: Session, farm_id: str) -> List[WaypointPath]:
        result = db.execute(
            select(WaypointPath)
            .where(WaypointPath.farm_id == farm_id)
            .order_by(desc(WaypointPath.created_at))
        )
        return list(result.scalars().all())

    def get_path(self, db: Session, farm_id: str, path_id: str) -> Optional[WaypointPath]:
        result = db.execute(
            select(WaypointPath).where(WaypointPath.farm_id == farm_id, WaypointPath.id == path_id)
        )
        return result.scalar_one_or_none()

    def create_path(self, db: Session, farm_id: str, obj_in: dict) -> WaypointPath:
        waypoints = obj_in.pop("waypoints", [])
        path = WaypointPath(farm_id=farm_id, **obj_in)
        db.add(path)
        db.flush()
        self._add_waypoints(db, path, waypoints)
        db.commit()
        db.refresh(path)
        return path

    def update_path(self, db: Session, path: WaypointPath, obj_in: dict) -> WaypointPath:
        waypoints = obj_in.pop("waypoints", [])
        for key, value in obj_in.items():
            setattr(path, key, value)

        # full overwrite of the ordered waypoint list
        db.execute(delete(Waypoint).where(Waypoint.path_id == path.id))
        db.expire(path, ["waypoints"])
        self._add_waypoints(db, path, waypoints)
        db.commit()
        db.refresh(path)
        return path

    def delete_path(self, db: Session, path: WaypointPath) -> None:
        db.execute(delete(Waypoint).where(Waypoint.path_id == path.id))
        db.expire(path, ["waypoints"])
        db.delete(path)
        db.commit()

    def _add_waypoints(self, db: Session, path: WaypointPath, waypoints: list[dict]) -> None:
        for order_index, waypoint in enumerate(waypoints):
            db.add(
                Waypoint(
                    path_id=path.id,
                    farm_id=path.farm_id,
                    name=waypoint["name"],
                    lat=waypoint["lat"],
                    long=waypoint["long"],
                    order_index=order_index,
                )
            )


waypoint_crud = CRUDWaypoint()
