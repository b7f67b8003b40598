import math

import pytest

from taste_trail.domains.restaurants.geo import EARTH_RADIUS_KM, bounding_box, haversine_km, within_radius


def destination(lat, lng, bearing_deg, distance_km):
    """Point reached by travelling distance_km from (lat, lng) along the initial bearing."""
    phi1, lam1 = math.radians(lat), math.radians(lng)
    theta = math.radians(bearing_deg)
    delta = distance_km / EARTH_RADIUS_KM
    phi2 = math.asin(math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta))
    lam2 = lam1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    return math.degrees(phi2), math.degrees(lam2)


def _inside(box, lat, lng):
    if not box.min_lat <= lat <= box.max_lat:
        return False
    return box.min_lng is None or box.min_lng <= lng <= box.max_lng


def test_haversine_known_distance():
    # Paris to London is roughly 344 km
    assert 340 < haversine_km(48.8566, 2.3522, 51.5074, -0.1278) < 348


def test_haversine_same_point_is_zero():
    assert haversine_km(40.7128, -74.006, 40.7128, -74.006) == 0.0


def test_bounding_box_near_the_antimeridian():
    box = bounding_box(0.0, 179.99, 50)
    assert box.min_lng is None and box.max_lng is None


def test_bounding_box_touching_a_pole_drops_longitude():
    box = bounding_box(89.0, 10.0, 200)
    assert box.min_lng is None and box.max_lng is None


@pytest.mark.parametrize("lat", [0.0, 45.0, 60.0, -60.0, 75.0])
def test_bounding_box_contains_the_whole_circle(lat):
    radius = 500.0
    box = bounding_box(lat, 10.0, radius)
    for step in range(720):
        point = destination(lat, 10.0, step / 2, radius * 0.999)
        assert _inside(box, *point), (lat, step / 2, point)


def test_within_radius_sorts_and_limits():
    points = [("far", (0.0, 0.5)), ("near", (0.0, 0.01)), ("mid", (0.0, 0.1))]
    hits = within_radius(0.0, 0.0, 20, points, lambda p: p[1], limit=2)
    assert [p[0] for p, _ in hits] == ["near", "mid"]


def test_nearby_at_high_latitude_returns_the_whole_ring(client, make_user, make_restaurant):
    user = make_user()
    bearings = list(range(0, 360, 30)) + [70, 75, 80, 85, 95, 265, 275, 280, 285, 290]
    for bearing in bearings:
        lat, lng = destination(60.0, 10.0, bearing, 499.5)
        make_restaurant(user, name=f"Ring {bearing}", latitude=lat, longitude=lng)
    lat, lng = destination(60.0, 10.0, 80, 500.5)
    make_restaurant(user, name="Just Outside", latitude=lat, longitude=lng)

    r = client.get("/api/restaurants/nearby", params={"lat": 60, "lng": 10, "radius": 500, "limit": 200})
    assert r.status_code == 200
    names = {x["name"] for x in r.json()["restaurants"]}
    assert names == {f"Ring {bearing}" for bearing in bearings}


def test_nearby_with_zero_radius_returns_the_centre_only(client, make_user, make_restaurant):
    user = make_user()
    make_restaurant(user, name="Centre", latitude=40.7128, longitude=-74.0060)
    lat, lng = destination(40.7128, -74.0060, 90, 0.01)
    make_restaurant(user, name="Next Door", latitude=lat, longitude=lng)

    r = client.get("/api/restaurants/nearby", params={"lat": 40.7128, "lng": -74.0060, "radius": 0})
    assert r.status_code == 200
    assert [x["name"] for x in r.json()["restaurants"]] == ["Centre"]


def test_nearby_excludes_points_just_past_the_radius(client, make_user, make_restaurant):
    user = make_user()
    inside_lat, inside_lng = destination(40.7128, -74.0060, 45, 4.99)
    outside_lat, outside_lng = destination(40.7128, -74.0060, 45, 5.01)
    make_restaurant(user, name="Inside", latitude=inside_lat, longitude=inside_lng)
    make_restaurant(user, name="Outside", latitude=outside_lat, longitude=outside_lng)

    r = client.get("/api/restaurants/nearby", params={"lat": 40.7128, "lng": -74.0060, "radius": 5})
    assert [x["name"] for x in r.json()["restaurants"]] == ["Inside"]
