"""
The drive-forward scenario: connect, pick a vehicle, spawn it, park the
spectator behind it, drive for a few seconds, brake, and tear down.

Usage:
    from simdrive.config import ScenarioConfig
    from simdrive.scenario import run_scenario

    raise SystemExit(run_scenario(ScenarioConfig(host="10.0.0.5")))
"""

from __future__ import annotations

import logging
import os
import time
from typing import Callable, Optional

import requests

from .actors import Actor, Vehicle, narrow_to_vehicle, spawn
from .client import SimClient, connect
from .config import ScenarioConfig
from .control import ControlLoopDriver, TelemetryRecord, print_telemetry
from .errors import SimulatorError
from .geometry import compute_trailing_pose
from .shutdown import ShutdownSequencer
from .world import World, get_recommended_spawn_poses, select_blueprint

log = logging.getLogger("simdrive.scenario")


def _setup(client: SimClient, cfg: ScenarioConfig):
    print("Getting world information...")
    world = client.get_world()

    print("Getting map name...")
    map_info = world.get_map()
    print(f"Connected to world: {map_info.name}")

    print("Getting blueprint library...")
    library = world.get_blueprint_library()

    print("Finding vehicle blueprint...")
    blueprint = select_blueprint(library, cfg.preferred_blueprint, cfg.fallback_pattern)
    print(f"Using vehicle: {blueprint.id}")

    print("Getting spawn points...")
    spawn_point = get_recommended_spawn_poses(map_info)[0]
    print(f"Spawn point: {spawn_point.location}")
    return world, blueprint, spawn_point


def _place_spectator(world: World, vehicle: Vehicle, cfg: ScenarioConfig) -> None:
    print("\nSetting up spectator camera...")
    spectator = world.get_spectator()
    pose = compute_trailing_pose(
        vehicle.get_transform(), cfg.spectator_back, cfg.spectator_up, cfg.spectator_pitch)
    spectator.set_transform(pose)
    print("Spectator camera positioned behind vehicle")


def run_scenario(
    cfg: ScenarioConfig,
    session: Optional[requests.Session] = None,
    sink: Callable[[TelemetryRecord], None] = print_telemetry,
    sleep: Callable[[float], None] = time.sleep,
    exit_fn: Callable[[int], None] = os._exit,
) -> int:
    """
    Run the whole scenario and return its exit code.

    Once an actor exists, every path (success or failure) ends in the
    ShutdownSequencer, which normally terminates the process through
    `exit_fn`. Failures before spawning are reported and returned as 1.
    """
    print(f"Connecting to simulation server: {cfg.host}:{cfg.port}")
    client: Optional[SimClient] = None
    actor: Optional[Actor] = None
    vehicle: Optional[Vehicle] = None
    failure: Optional[str] = None

    try:
        client = connect(cfg.host, cfg.port, timeout=cfg.timeout,
                         session=session, verbose=cfg.verbose)
        world, blueprint, spawn_point = _setup(client, cfg)

        print("Spawning vehicle...")
        actor = spawn(world, blueprint, spawn_point)
        print("Casting vehicle...")
        vehicle = narrow_to_vehicle(actor)
        print(f"Vehicle spawned (ID: {vehicle.id})")

        sleep(cfg.spawn_settle)
        _place_spectator(world, vehicle, cfg)

        print(f"\n=== Scenario start: Moving vehicle forward for "
              f"{cfg.ticks * cfg.step:g} seconds ===")
        driver = ControlLoopDriver(
            vehicle, ticks=cfg.ticks, step=cfg.step, throttle=cfg.throttle,
            settle=cfg.brake_settle, sink=sink, sleep=sleep)
        result = driver.run()
        failure = result.failure
    except SimulatorError as e:
        failure = f"{type(e).__name__}: {e}"
    except Exception as e:
        # Anything else still has to reach teardown once an actor exists.
        log.exception("Unexpected error during scenario")
        failure = f"{type(e).__name__}: {e}"

    exit_code = 0 if failure is None else 1
    if failure is not None:
        log.error(failure)
        print(f"Error occurred: {failure}")

    if actor is None:
        if client is not None:
            client.close()
        return exit_code

    ShutdownSequencer(vehicle, actor, destroy_remote=cfg.destroy_remote,
                      exit_fn=exit_fn).run(exit_code)
    return exit_code
