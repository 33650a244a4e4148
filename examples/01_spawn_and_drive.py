"""
Example 01: Spawn a vehicle, watch it from behind, drive a short burst.
Run with a simulation server listening on 127.0.0.1:2000.
"""
from simdrive.actors import narrow_to_vehicle, spawn
from simdrive.client import connect
from simdrive.control import ControlLoopDriver
from simdrive.geometry import compute_trailing_pose
from simdrive.shutdown import ShutdownSequencer
from simdrive.world import get_recommended_spawn_poses, select_blueprint

client = connect("127.0.0.1", 2000, timeout=10.0)
print("Server version:", client.get_server_version())

world = client.get_world()
town = world.get_map()
print(f"Map {town.name} has {len(town.spawn_points)} spawn points.")

blueprint = select_blueprint(world.get_blueprint_library())
print("Blueprint:", blueprint.id)

actor = spawn(world, blueprint, get_recommended_spawn_poses(town)[0])
vehicle = narrow_to_vehicle(actor)
print("Spawned:", vehicle)

# Park the spectator 7 m behind and 3 m above, looking slightly down
world.get_spectator().set_transform(
    compute_trailing_pose(vehicle.get_transform(), 7.0, 3.0, -10.0))

# Twenty ticks at full throttle, then brake
result = ControlLoopDriver(vehicle, ticks=20, throttle=1.0).run()
print(f"Loop ended in state '{result.state.value}' after {result.commands_sent} commands.")
if result.telemetry:
    print(f"Top speed: {max(r.speed_kmh for r in result.telemetry):.1f} km/h")

# Clean up (destroys the vehicle explicitly, then exits the process)
ShutdownSequencer(vehicle, actor, destroy_remote=True).run(0 if result.ok else 1)
