"""World snapshot queries and blueprint selection."""

import pytest

from simdrive.actors import Actor, Vehicle, narrow_to_vehicle, spawn
from simdrive.errors import NoBlueprintsFoundError, NoSpawnPointsError, RemoteCallError
from simdrive.geometry import Location, Rotation, Transform
from simdrive.world import (
    Blueprint,
    BlueprintLibrary,
    MapInfo,
    get_recommended_spawn_poses,
    select_blueprint,
)


def _library(*ids):
    return BlueprintLibrary([Blueprint(i) for i in ids])


def test_get_map_parses_spawn_points(client):
    info = client.get_world().get_map()
    assert info.name == "Town03"
    assert info.spawn_points == (
        Transform(Location(10.0, 20.0, 0.5), Rotation(yaw=90.0)),
    )


def test_no_spawn_points(client, server):
    server.spawn_points = []
    info = client.get_world().get_map()
    with pytest.raises(NoSpawnPointsError):
        get_recommended_spawn_poses(info)


def test_spawn_poses_in_server_order():
    a = Transform(Location(1, 0, 0))
    b = Transform(Location(2, 0, 0))
    assert get_recommended_spawn_poses(MapInfo("m", (a, b)))[0] == a


def test_blueprint_library_from_server(client):
    library = client.get_world().get_blueprint_library()
    assert len(library) == 2
    assert "vehicle.tesla.model3" in library
    assert library.find("vehicle.tesla.model3").has_tag("tesla")


def test_exact_lookup_wins():
    library = _library("vehicle.other.car", "vehicle.tesla.model3")
    assert select_blueprint(library).id == "vehicle.tesla.model3"


def test_fallback_takes_first_match():
    library = _library("walker.pedestrian.0001", "vehicle.other.car", "vehicle.zeta.van")
    assert library.find("vehicle.tesla.model3") is None
    assert select_blueprint(library).id == "vehicle.other.car"


def test_fallback_without_vehicles_fails():
    library = _library("walker.pedestrian.0001", "static.prop.bench")
    with pytest.raises(NoBlueprintsFoundError):
        select_blueprint(library)


def test_filter_is_wildcard_not_prefix():
    library = _library("vehicle.tesla.model3", "vehicle.tesla.cybertruck", "vehicle.audi.tt")
    assert [bp.id for bp in library.filter("vehicle.tesla.*")] == [
        "vehicle.tesla.model3", "vehicle.tesla.cybertruck"]
    assert [bp.id for bp in library.filter("*.tt")] == ["vehicle.audi.tt"]


def test_spectator_set_transform(client, server):
    spectator = client.get_world().get_spectator()
    pose = Transform(Location(1.0, 2.0, 3.0), Rotation(pitch=-10.0))
    spectator.set_transform(pose)
    assert Transform.from_dict(server.spectator_transform) == pose
    assert spectator.get_transform() == pose


def test_get_actor_returns_generic_handle(client):
    world = client.get_world()
    spawned = spawn(world, Blueprint("vehicle.tesla.model3"), Transform())
    actor = world.get_actor(spawned.id)
    assert type(actor) is Actor
    assert actor.id == spawned.id
    assert actor.type_id == "vehicle.tesla.model3"
    assert isinstance(narrow_to_vehicle(actor), Vehicle)


def test_get_actor_unknown_id(client):
    with pytest.raises(RemoteCallError, match="not found"):
        client.get_world().get_actor(999)


def test_malformed_spawn_points(client, server):
    server.spawn_points = [{"location": {"x": "north"}}]
    with pytest.raises(RemoteCallError, match="get_map"):
        client.get_world().get_map()
