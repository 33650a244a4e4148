"""
SimDrive Python Client
======================
HTTP client for a remote real-time simulation server. Every remote call the
scenario makes (world queries, spawning, control, telemetry, spectator moves)
goes through one SimClient and its single requests.Session.

Usage:
    from simdrive.client import connect

    client = connect("127.0.0.1", 2000, timeout=10.0)
    world = client.get_world()
    print(world.get_map().name)

Requirements:
    pip install requests
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT, RPC_PATH
from .errors import CallTimeoutError, RemoteCallError, ServerConnectionError, malformed_reply
from .world import World

log = logging.getLogger("simdrive.client")


# ─── Data types ────────────────────────────────────────────────────────────
@dataclass
class RpcResult:
    """Parsed response from a remote command."""
    raw:     Dict[str, Any]
    ok:      bool
    error:   Optional[str] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "RpcResult":
        error = data.get("error")
        ok = error is None and data.get("ok", True)
        return cls(raw=data, ok=bool(ok), error=error)

    def __repr__(self) -> str:
        if self.error:
            return f"RpcResult(ERROR: {self.error})"
        return f"RpcResult(ok={self.ok}, keys={list(self.raw.keys())})"


# ─── Client ────────────────────────────────────────────────────────────────
class SimClient:
    """
    Owns the one connection to the simulation server.

    There is no reconnection: once a call fails with ServerConnectionError or
    the client has been closed, the run is over.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        verbose: bool = False,
    ):
        self.host     = host
        self.port     = port
        self.base_url = f"http://{host}:{port}{RPC_PATH}"
        self.timeout  = timeout
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})
        self._closed  = False

        if verbose:
            logging.basicConfig(level=logging.DEBUG)

    # ── Timeout ────────────────────────────────────────────────────────────
    def set_timeout(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError(f"timeout must be positive, got {seconds}")
        self.timeout = float(seconds)

    def get_timeout(self) -> float:
        return self.timeout

    # ── Core transport ─────────────────────────────────────────────────────
    def _send(self, cmd: str, args: Optional[Dict] = None) -> Dict[str, Any]:
        """Send a raw command to the server and return the parsed response."""
        if self._closed:
            raise ServerConnectionError(
                f"Connection to {self.host}:{self.port} is closed; cannot send '{cmd}'")

        payload = {"cmd": cmd, "args": args or {}}

        log.debug(f"→ {cmd} {args}")
        try:
            resp = self._session.put(self.base_url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.Timeout:
            raise CallTimeoutError(
                f"'{cmd}' timed out after {self.timeout:.1f}s waiting for "
                f"{self.host}:{self.port}")
        except requests.exceptions.ConnectionError:
            raise ServerConnectionError(
                f"Cannot connect to simulation server at {self.base_url}. "
                "Ensure the server is running and reachable.")
        except requests.exceptions.HTTPError as e:
            raise RemoteCallError(f"'{cmd}' failed: {e}") from e
        except requests.exceptions.RequestException as e:
            raise RemoteCallError(f"'{cmd}' could not be sent: {type(e).__name__}: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            raise RemoteCallError(f"'{cmd}' returned a body that is not JSON")

        # Some gateways wrap the return value in {"ReturnValue": "..."}
        return_val = body.get("ReturnValue", body) if isinstance(body, dict) else body
        if isinstance(return_val, str):
            try:
                return_val = json.loads(return_val)
            except json.JSONDecodeError:
                return_val = {"raw": return_val}
        if not isinstance(return_val, dict):
            raise RemoteCallError(f"'{cmd}' returned {type(return_val).__name__}, expected object")

        log.debug(f"← {return_val}")
        return return_val

    def execute(self, cmd: str, args: Optional[Dict] = None) -> RpcResult:
        """Execute any command and return an RpcResult."""
        data = self._send(cmd, args)
        return RpcResult.from_response(data)

    def call(self, cmd: str, args: Optional[Dict] = None) -> Dict[str, Any]:
        """Execute a command, raising RemoteCallError if the server reports an error."""
        result = self.execute(cmd, args)
        if not result.ok:
            raise RemoteCallError(f"'{cmd}' failed: {result.error or 'server reported failure'}")
        return result.raw

    # ── Server meta ────────────────────────────────────────────────────────
    def ping(self) -> Dict:
        return self.call("ping")

    def get_server_version(self) -> str:
        return str(self.ping().get("version", "unknown"))

    # ── World ──────────────────────────────────────────────────────────────
    def get_world(self) -> World:
        data = self.call("get_world")
        with malformed_reply("get_world"):
            return World(self, int(data.get("world_id", 0)))

    # ── Lifetime ───────────────────────────────────────────────────────────
    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"SimClient({self.host}:{self.port}, timeout={self.timeout}s, {state})"


def connect(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
    verbose: bool = False,
) -> SimClient:
    """Create a client and make sure the server answers before handing it out."""
    client = SimClient(host, port, timeout=timeout, session=session, verbose=verbose)
    try:
        version = client.get_server_version()
    except Exception:
        client.close()
        raise
    log.info(f"Connected to simulation server {host}:{port} (version {version})")
    return client
