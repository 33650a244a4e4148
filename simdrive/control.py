"""
Fixed-step control loop: drive a vehicle with a constant command for N ticks,
report telemetry every tick, then brake and let it settle.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .actors import Vehicle, VehicleControl
from .config import BRAKE_SETTLE_S, STEP_SECONDS, THROTTLE, TICKS
from .errors import SimulatorError
from .geometry import Location, Vector3D

log = logging.getLogger("simdrive.control")

MS_TO_KMH = 3.6


class LoopState(enum.Enum):
    IDLE    = "idle"
    RUNNING = "running"
    BRAKING = "braking"
    STOPPED = "stopped"
    ABORTED = "aborted"


@dataclass(frozen=True)
class TelemetryRecord:
    elapsed_time: float
    location:     Location
    speed_kmh:    float

    def format_line(self) -> str:
        loc = self.location
        return (f"Time {self.elapsed_time:.1f}s - "
                f"Position: ({loc.x:.2f}, {loc.y:.2f}, {loc.z:.2f}) "
                f"Speed: {self.speed_kmh:.1f} km/h")


@dataclass
class DriveResult:
    state:           LoopState
    commands_sent:   int = 0
    telemetry:       List[TelemetryRecord] = field(default_factory=list)
    failure:         Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is LoopState.STOPPED


def speed_kmh(velocity: Vector3D) -> float:
    """Scalar speed in km/h from a velocity in m/s."""
    return velocity.length() * MS_TO_KMH


def print_telemetry(record: TelemetryRecord) -> None:
    print(record.format_line())


class ControlLoopDriver:
    """
    Drives one vehicle through IDLE → RUNNING → BRAKING → STOPPED.

    Timing is tick-driven: each step sleeps a fixed `step` after the work is
    done, so the wall-clock duration can exceed ticks * step. Any remote
    failure inside the loop moves the driver to ABORTED and is recorded in the
    result rather than raised.
    """

    def __init__(
        self,
        vehicle: Vehicle,
        ticks: int = TICKS,
        step: float = STEP_SECONDS,
        throttle: float = THROTTLE,
        settle: float = BRAKE_SETTLE_S,
        sink: Callable[[TelemetryRecord], None] = print_telemetry,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.vehicle  = vehicle
        self.ticks    = ticks
        self.step     = step
        self.throttle = throttle
        self.settle   = settle
        self._sink    = sink
        self._sleep   = sleep
        self.state    = LoopState.IDLE

    def run(self) -> DriveResult:
        if self.state is not LoopState.IDLE:
            raise RuntimeError(f"Control loop already ran (state={self.state.value})")

        result = DriveResult(state=self.state)
        control = VehicleControl(throttle=self.throttle, steer=0.0, brake=0.0)
        self.state = LoopState.RUNNING
        log.info(f"Driving {self.vehicle} for {self.ticks} ticks of {self.step:.3f}s "
                 f"at throttle {control.throttle:.2f}")

        try:
            for i in range(self.ticks):
                self.vehicle.apply_control(control)
                result.commands_sent += 1

                location = self.vehicle.get_location()
                velocity = self.vehicle.get_velocity()
                record = TelemetryRecord(i * self.step, location, speed_kmh(velocity))
                result.telemetry.append(record)
                self._sink(record)

                self._sleep(self.step)

            self.state = LoopState.BRAKING
            log.info("Applying brake to stop")
            self.vehicle.apply_control(VehicleControl(throttle=0.0, steer=0.0, brake=1.0))
            result.commands_sent += 1
            self._sleep(self.settle)
        except SimulatorError as e:
            log.error(f"Control loop aborted in state '{self.state.value}': {e}")
            self.state = LoopState.ABORTED
            result.failure = f"{type(e).__name__}: {e}"
        else:
            self.state = LoopState.STOPPED

        result.state = self.state
        return result
