"""In-memory stand-in for the simulation server, plugged in as the requests session."""

import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from simdrive.actors import VEHICLE_CAPABILITIES
from simdrive.client import SimClient

SPECTATOR_ID = 1


class FakeResponse:
    def __init__(self, body: Any, status_code: int = 200):
        self._body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeServer:
    """
    Answers the commands SimClient sends. Tests tweak the attributes to shape
    the world and inject failures.
    """

    def __init__(self):
        self.map_name = "Town03"
        self.spawn_points: List[Dict] = [{
            "location": {"x": 10.0, "y": 20.0, "z": 0.5},
            "rotation": {"pitch": 0.0, "yaw": 90.0, "roll": 0.0},
        }]
        self.blueprints: List[Dict] = [
            {"id": "vehicle.tesla.model3", "tags": ["tesla", "model3"]},
            {"id": "walker.pedestrian.0001", "tags": ["pedestrian"]},
        ]
        self.capabilities = sorted(VEHICLE_CAPABILITIES)
        self.velocity = {"x": 0.0, "y": 0.0, "z": 0.0}
        self.next_actor_id = 42
        self.actors: Dict[int, Dict] = {}
        self.spectator_transform: Optional[Dict] = None
        self.controls: List[Dict] = []
        self.calls: List[str] = []
        self.spawn_error: Optional[str] = None
        self.destroy_error: Optional[str] = None
        # cmd -> exception to raise from the transport, or str for an error payload
        self.failures: Dict[str, Any] = {}
        # cmd -> number of successful calls before the failure kicks in
        self.fail_after: Dict[str, int] = {}

    def count(self, cmd: str) -> int:
        return self.calls.count(cmd)

    def handle(self, cmd: str, args: Dict) -> Any:
        self.calls.append(cmd)
        if cmd in self.failures and self.count(cmd) > self.fail_after.get(cmd, 0):
            failure = self.failures[cmd]
            if isinstance(failure, Exception):
                raise failure
            return {"error": failure}
        return getattr(self, f"_do_{cmd}")(args)

    # ── commands ──────────────────────────────────────────────────────────
    def _do_ping(self, args):
        return {"version": "0.9.15"}

    def _do_get_world(self, args):
        return {"world_id": 7}

    def _do_get_map(self, args):
        return {"name": self.map_name, "spawn_points": self.spawn_points}

    def _do_get_blueprints(self, args):
        return {"blueprints": self.blueprints}

    def _do_get_spectator(self, args):
        return {"actor_id": SPECTATOR_ID}

    def _do_spawn_actor(self, args):
        if self.spawn_error:
            return {"error": self.spawn_error}
        actor_id = self.next_actor_id
        self.next_actor_id += 1
        self.actors[actor_id] = {"transform": args["transform"], "type_id": args["blueprint_id"]}
        return {"actor_id": actor_id, "type_id": args["blueprint_id"],
                "capabilities": self.capabilities}

    def _do_get_actor(self, args):
        actor_id = args["actor_id"]
        if actor_id not in self.actors:
            return {"error": f"actor {actor_id} not found"}
        return {"actor_id": actor_id, "type_id": self.actors[actor_id]["type_id"],
                "capabilities": self.capabilities}

    def _do_get_actor_transform(self, args):
        actor_id = args["actor_id"]
        if actor_id == SPECTATOR_ID:
            return self.spectator_transform or {}
        if actor_id not in self.actors:
            return {"error": f"actor {actor_id} not found"}
        return self.actors[actor_id]["transform"]

    def _do_set_actor_transform(self, args):
        if args["actor_id"] == SPECTATOR_ID:
            self.spectator_transform = args["transform"]
        return {"ok": True}

    def _do_get_actor_velocity(self, args):
        return self.velocity

    def _do_apply_vehicle_control(self, args):
        self.controls.append(args["control"])
        return {"ok": True}

    def _do_destroy_actor(self, args):
        if self.destroy_error:
            return {"error": self.destroy_error}
        existed = self.actors.pop(args["actor_id"], None) is not None
        return {"destroyed": existed}


class FakeSession:
    def __init__(self, server: FakeServer, wrap: bool = False):
        self.server = server
        self.headers: Dict[str, str] = {}
        self.wrap = wrap
        self.closed = False
        self.requests: List[Dict] = []

    def put(self, url, json=None, timeout=None):
        self.requests.append({"url": url, "json": json, "timeout": timeout})
        body = self.server.handle(json["cmd"], json["args"])
        if self.wrap:
            body = {"ReturnValue": _dumps(body)}
        return FakeResponse(body)

    def close(self):
        self.closed = True


def _dumps(body):
    return json.dumps(body)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def session(server):
    return FakeSession(server)


@pytest.fixture
def client(session):
    return SimClient("127.0.0.1", 2000, timeout=5.0, session=session)
