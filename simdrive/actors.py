"""
Actor lifecycle: spawning, capability-checked narrowing to a vehicle, and
best-effort destruction.

Handles are local references only. They hold an id and the client needed to
act on it; the server decides when the actor actually goes away. Dropping a
handle never destroys anything remotely.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Optional

from .errors import (
    CallTimeoutError,
    RemoteCallError,
    ServerConnectionError,
    SimulatorError,
    SpawnError,
    TypeMismatchError,
    malformed_reply,
)
from .geometry import Location, Transform, Vector3D

if TYPE_CHECKING:
    from .client import SimClient
    from .world import Blueprint, World

log = logging.getLogger("simdrive.actors")

VEHICLE_CAPABILITIES: FrozenSet[str] = frozenset(
    {"apply_control", "get_transform", "get_velocity", "destroy"})


def _clamp(value: float, lo: float, hi: float, neutral: float = 0.0) -> float:
    value = float(value)
    if math.isnan(value):
        return neutral
    return max(lo, min(hi, value))


# ─── Control command ───────────────────────────────────────────────────────
@dataclass
class VehicleControl:
    throttle:   float = 0.0
    steer:      float = 0.0
    brake:      float = 0.0
    hand_brake: bool  = False
    reverse:    bool  = False

    def clamped(self) -> "VehicleControl":
        return VehicleControl(
            throttle=_clamp(self.throttle, 0.0, 1.0),
            steer=_clamp(self.steer, -1.0, 1.0),
            brake=_clamp(self.brake, 0.0, 1.0),
            hand_brake=bool(self.hand_brake),
            reverse=bool(self.reverse),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "throttle":   self.throttle,
            "steer":      self.steer,
            "brake":      self.brake,
            "hand_brake": self.hand_brake,
            "reverse":    self.reverse,
        }


# ─── Handles ───────────────────────────────────────────────────────────────
class Actor:
    """A server-resident actor as seen from this client."""

    def __init__(
        self,
        client: "SimClient",
        actor_id: int,
        type_id: str = "",
        capabilities: FrozenSet[str] = frozenset(),
    ):
        self._client      = client
        self.id           = actor_id
        self.type_id      = type_id
        self.capabilities = frozenset(capabilities)

    @property
    def is_released(self) -> bool:
        return self._client is None

    def _call(self, cmd: str, args: Optional[Dict] = None) -> Dict[str, Any]:
        if self._client is None:
            raise ServerConnectionError(f"Handle for actor {self.id} has been released")
        merged = {"actor_id": self.id}
        merged.update(args or {})
        return self._client.call(cmd, merged)

    def get_transform(self) -> Transform:
        data = self._call("get_actor_transform")
        with malformed_reply("get_actor_transform"):
            return Transform.from_dict(data)

    def get_location(self) -> Location:
        return self.get_transform().location

    def release(self) -> None:
        """Forget the client reference. No remote call is made."""
        self._client = None

    def __repr__(self) -> str:
        state = ", released" if self.is_released else ""
        return f"{type(self).__name__}(id={self.id}, type_id='{self.type_id}'{state})"


class Vehicle(Actor):
    """An actor that accepts control commands and reports its velocity."""

    def apply_control(self, control: VehicleControl) -> None:
        self._call("apply_vehicle_control", {"control": control.clamped().to_dict()})

    def get_velocity(self) -> Vector3D:
        data = self._call("get_actor_velocity")
        with malformed_reply("get_actor_velocity"):
            return Vector3D.from_dict(data)

    def destroy(self) -> bool:
        return destroy(self)


# ─── Lifecycle ─────────────────────────────────────────────────────────────
def spawn(world: "World", blueprint: "Blueprint", pose: Transform) -> Actor:
    """Ask the server to place `blueprint` at `pose`."""
    try:
        result = world.client.execute("spawn_actor", {
            "blueprint_id": blueprint.id,
            "transform":    pose.to_dict(),
        })
    except (ServerConnectionError, CallTimeoutError):
        raise
    except RemoteCallError as e:
        raise SpawnError(f"Spawning '{blueprint.id}' failed: {e}") from e

    if not result.ok or "actor_id" not in result.raw:
        raise SpawnError(
            f"Server rejected spawn of '{blueprint.id}' at {pose.location}: "
            f"{result.error or 'no actor id returned'}")

    with malformed_reply("spawn_actor"):
        actor = Actor(
            world.client,
            int(result.raw["actor_id"]),
            type_id=str(result.raw.get("type_id", blueprint.id)),
            capabilities=frozenset(result.raw.get("capabilities", [])),
        )
    log.info(f"Spawned {actor}")
    return actor


def narrow_to_vehicle(actor: Actor) -> Vehicle:
    """Return a Vehicle view of `actor` if it supports vehicle control."""
    missing = VEHICLE_CAPABILITIES - actor.capabilities
    if missing:
        raise TypeMismatchError(
            f"Actor {actor.id} ('{actor.type_id}') is not a vehicle; "
            f"missing capabilities: {', '.join(sorted(missing))}")
    return Vehicle(actor._client, actor.id, actor.type_id, actor.capabilities)


def destroy(actor: Actor) -> bool:
    """
    Request remote destruction of `actor`.

    Safe to call on an actor that is already gone or whose connection has
    dropped: the failure is logged and False is returned instead of raising.
    """
    try:
        data = actor._call("destroy_actor")
    except SimulatorError as e:
        log.warning(f"destroy of actor {actor.id} failed, continuing: {e}")
        return False
    destroyed = bool(data.get("destroyed", True))
    if not destroyed:
        log.warning(f"Server reports actor {actor.id} was already gone")
    return destroyed
