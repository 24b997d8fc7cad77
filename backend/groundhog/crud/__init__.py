from groundhog.crud.crud_analysis import analysis_crud
from groundhog.crud.crud_estimate import estimate_crud
from groundhog.crud.crud_farm import farm_crud
from groundhog.crud.crud_sensor import sensor_crud
from groundhog.crud.crud_waypoint import waypoint_crud

__all__ = ["analysis_crud", "estimate_crud", "farm_crud", "sensor_crud", "waypoint_crud"]
