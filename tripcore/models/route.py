"""Route models exchanged with the directions provider."""

from pydantic import Field

from tripcore.models.common import LatLng, WireModel


class OrderedStop(WireModel):
    """A geocoded waypoint in visiting order."""

    id: str
    title: str
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)


class RouteLeg(WireModel):
    """One directed hop between two consecutive stops."""

    distance_meters: int = 0
    duration_seconds: int = 0
    start_location: LatLng
    end_location: LatLng
    polyline: str = ""


class RouteResult(WireModel):
    """Ordered legs plus totals for a computed route.

    waypoint_order holds zero-based indices into the original intermediate
    stops and is only present when reordering was requested.
    """

    legs: list[RouteLeg]
    total_distance_meters: int
    total_duration_seconds: int
    overview_polyline: str = ""
    waypoint_order: list[int] | None = None

    @property
    def total_distance_km(self) -> float:
        return self.total_distance_meters / 1000

    @property
    def total_duration_minutes(self) -> int:
        return round(self.total_duration_seconds / 60)
