"""
Ordered teardown for a scenario run.

The spawned actor is normally NOT destroyed remotely. Destroying it and then
releasing the local handle while the process is exiting has been seen to crash
the server inside its own cleanup path, so the default is to drop the local
references and let the server reap the actor when the connection goes away.
The process then leaves through os._exit(), skipping interpreter teardown so
that no finalizer can race the server's actor-graph maintenance.
"""

from __future__ import annotations

import enum
import logging
import os
import sys
from typing import Callable, Optional

from .actors import Actor, destroy

log = logging.getLogger("simdrive.shutdown")


class ShutdownState(enum.Enum):
    PENDING          = "pending"
    VEHICLE_RELEASED = "vehicle_released"
    ACTOR_RELEASED   = "actor_released"
    TERMINATED       = "terminated"


def _flush_output() -> None:
    for handler in logging.getLogger().handlers + log.handlers:
        handler.flush()
    for stream in (sys.stdout, sys.stderr):
        if stream is not None:
            stream.flush()


class ShutdownSequencer:
    """
    Releases the vehicle handle, then the generic actor handle, then ends the
    process. Each step is guarded on its own so a failure in one never stops
    the next; TERMINATED is always reached.

    This is the only place allowed to request remote destruction of the
    spawned actor, and only when `destroy_remote` is set.
    """

    def __init__(
        self,
        vehicle: Optional[Actor] = None,
        actor: Optional[Actor] = None,
        destroy_remote: bool = False,
        exit_fn: Callable[[int], None] = os._exit,
    ):
        self.vehicle        = vehicle
        self.actor          = actor
        self.destroy_remote = destroy_remote
        self._exit_fn       = exit_fn
        self.state          = ShutdownState.PENDING

    def _release_vehicle(self) -> None:
        vehicle, self.vehicle = self.vehicle, None
        if vehicle is None:
            return
        try:
            if self.destroy_remote:
                destroyed = destroy(vehicle)
                log.info(f"Remote destroy of actor {vehicle.id}: "
                         f"{'ok' if destroyed else 'not confirmed'}")
        finally:
            vehicle.release()

    def _release_actor(self) -> None:
        actor, self.actor = self.actor, None
        if actor is not None:
            actor.release()

    def run(self, exit_code: int = 0) -> ShutdownState:
        print("\nCleaning up...")

        try:
            self._release_vehicle()
        except Exception as e:
            log.warning(f"Releasing vehicle handle failed, continuing: {e}")
        self.state = ShutdownState.VEHICLE_RELEASED

        try:
            self._release_actor()
        except Exception as e:
            log.warning(f"Releasing actor handle failed, continuing: {e}")
        self.state = ShutdownState.ACTOR_RELEASED

        if exit_code == 0:
            print("Scenario completed!")
        else:
            print("Scenario failed.", file=sys.stderr)

        self.state = ShutdownState.TERMINATED
        try:
            _flush_output()
        except Exception as e:
            log.warning(f"Flushing output before exit failed: {e}")
        self._exit_fn(exit_code)
        return self.state
