"""
Error taxonomy for SimDrive.

Every error raised by the client derives from SimulatorError so that the
scenario entry point can catch them all in one place and turn them into an
exit code.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class SimulatorError(Exception):
    """Base class for all SimDrive errors."""


# ─── Transport ─────────────────────────────────────────────────────────────
class RemoteCallError(SimulatorError):
    """A remote call failed (server error payload, bad status, bad body)."""


class ServerConnectionError(RemoteCallError, ConnectionError):
    """The server is unreachable or the channel has been closed."""


class CallTimeoutError(RemoteCallError, TimeoutError):
    """The server did not answer within the configured timeout."""


# ─── World / actors ────────────────────────────────────────────────────────
class NoSpawnPointsError(SimulatorError):
    """The map has no recommended spawn points."""


class NoBlueprintsFoundError(SimulatorError):
    """A blueprint filter matched nothing."""


class SpawnError(SimulatorError):
    """The server refused to place the actor."""


class TypeMismatchError(SimulatorError):
    """An actor does not expose the capabilities it is being narrowed to."""


# ─── Reply decoding ────────────────────────────────────────────────────────
@contextmanager
def malformed_reply(cmd: str) -> Iterator[None]:
    """Turn a missing or mistyped field in a reply to `cmd` into RemoteCallError."""
    try:
        yield
    except (KeyError, ValueError, TypeError) as e:
        raise RemoteCallError(f"Malformed reply to '{cmd}': {type(e).__name__}: {e}") from e
