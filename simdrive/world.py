"""
Read-only world state: map metadata, spawn points, the blueprint catalog and
the spectator viewpoint.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Tuple

from .actors import Actor
from .config import FALLBACK_PATTERN, PREFERRED_BLUEPRINT
from .errors import NoBlueprintsFoundError, NoSpawnPointsError, malformed_reply
from .geometry import Transform

if TYPE_CHECKING:
    from .client import SimClient

log = logging.getLogger("simdrive.world")


# ─── Data types ────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class MapInfo:
    name:         str
    spawn_points: Tuple[Transform, ...] = ()

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "MapInfo":
        points = tuple(Transform.from_dict(p) for p in data.get("spawn_points", []))
        return cls(name=str(data.get("name", "")), spawn_points=points)


@dataclass(frozen=True)
class Blueprint:
    id:         str
    tags:       Tuple[str, ...] = ()
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "Blueprint":
        return cls(
            id=str(data["id"]),
            tags=tuple(data.get("tags", [])),
            attributes=dict(data.get("attributes", {})),
        )

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


class BlueprintLibrary:
    """Catalog of instantiable actor kinds, keyed by blueprint id."""

    def __init__(self, blueprints: List[Blueprint]):
        self._blueprints: Dict[str, Blueprint] = {}
        for bp in blueprints:
            self._blueprints.setdefault(bp.id, bp)

    def find(self, blueprint_id: str) -> Optional[Blueprint]:
        return self._blueprints.get(blueprint_id)

    def filter(self, pattern: str) -> List[Blueprint]:
        """Blueprints whose id matches a shell-style wildcard, in catalog order."""
        matches = [bp for bp in self._blueprints.values()
                   if fnmatch.fnmatchcase(bp.id, pattern)]
        if not matches:
            raise NoBlueprintsFoundError(f"No blueprints match '{pattern}'")
        return matches

    def __len__(self) -> int:
        return len(self._blueprints)

    def __iter__(self) -> Iterator[Blueprint]:
        return iter(self._blueprints.values())

    def __contains__(self, blueprint_id: object) -> bool:
        return blueprint_id in self._blueprints


class Spectator:
    """The server's single observation viewpoint. Always exists; never spawned."""

    def __init__(self, client: "SimClient", actor_id: int):
        self._client = client
        self.id      = actor_id

    def get_transform(self) -> Transform:
        data = self._client.call("get_actor_transform", {"actor_id": self.id})
        with malformed_reply("get_actor_transform"):
            return Transform.from_dict(data)

    def set_transform(self, transform: Transform) -> None:
        self._client.call("set_actor_transform", {
            "actor_id":  self.id,
            "transform": transform.to_dict(),
        })


class World:
    """Opaque reference to the simulated world held by the server."""

    def __init__(self, client: "SimClient", world_id: int):
        self.client = client
        self.id     = world_id

    def get_map(self) -> MapInfo:
        data = self.client.call("get_map")
        with malformed_reply("get_map"):
            return MapInfo.from_response(data)

    def get_blueprint_library(self) -> BlueprintLibrary:
        data = self.client.call("get_blueprints")
        with malformed_reply("get_blueprints"):
            return BlueprintLibrary([Blueprint.from_response(d) for d in data.get("blueprints", [])])

    def get_spectator(self) -> Spectator:
        data = self.client.call("get_spectator")
        with malformed_reply("get_spectator"):
            return Spectator(self.client, int(data["actor_id"]))

    def get_actor(self, actor_id: int) -> Actor:
        """Generic handle for an existing actor; narrow it before driving it."""
        data = self.client.call("get_actor", {"actor_id": actor_id})
        with malformed_reply("get_actor"):
            return Actor(
                self.client,
                int(data["actor_id"]),
                type_id=str(data.get("type_id", "")),
                capabilities=frozenset(data.get("capabilities", [])),
            )

    def __repr__(self) -> str:
        return f"World(id={self.id})"


# ─── Queries ───────────────────────────────────────────────────────────────
def get_recommended_spawn_poses(map_info: MapInfo) -> Tuple[Transform, ...]:
    if not map_info.spawn_points:
        raise NoSpawnPointsError(f"Map '{map_info.name}' has no recommended spawn points")
    return map_info.spawn_points


def select_blueprint(
    library: BlueprintLibrary,
    preferred: str = PREFERRED_BLUEPRINT,
    fallback_pattern: str = FALLBACK_PATTERN,
) -> Blueprint:
    """Exact id first; otherwise the first blueprint matching `fallback_pattern`."""
    bp = library.find(preferred)
    if bp is None:
        bp = library.filter(fallback_pattern)[0]
        log.info(f"'{preferred}' not in catalog, falling back to '{bp.id}'")
    else:
        log.info(f"Using preferred blueprint '{bp.id}'")
    return bp
