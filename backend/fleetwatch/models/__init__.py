"""Import all models to register them with SQLAlchemy metadata."""
from fleetwatch.models.base import Base
from fleetwatch.models.boat import BoatInfo
from fleetwatch.models.boat_location import BoatCurrentLocation
from fleetwatch.models.boat_log import BoatLocationLog
