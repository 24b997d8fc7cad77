from groundhog.models.farm import Farm
from groundhog.models.sensor_point import SensorPoint
from groundhog.models.chemical_estimate import ChemicalEstimate
from groundhog.models.ai_analysis import AIAnalysis
from groundhog.models.waypoint import Waypoint, WaypointPath

__all__ = ["Farm", "SensorPoint", "ChemicalEstimate", "AIAnalysis", "Waypoint", "WaypointPath"]
