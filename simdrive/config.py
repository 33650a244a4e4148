"""Defaults and per-run settings for the scripted scenario."""

from __future__ import annotations

from dataclasses import dataclass

# ─── Connection ────────────────────────────────────────────────────────────
DEFAULT_HOST    = "127.0.0.1"
DEFAULT_PORT    = 2000
DEFAULT_TIMEOUT = 10.0
RPC_PATH        = "/rpc/call"

# ─── Scenario ──────────────────────────────────────────────────────────────
PREFERRED_BLUEPRINT = "vehicle.tesla.model3"
FALLBACK_PATTERN    = "vehicle.*"

TICKS           = 50
STEP_SECONDS    = 0.1
THROTTLE        = 0.5
SPAWN_SETTLE_S  = 1.0
BRAKE_SETTLE_S  = 2.0

# Spectator placement relative to the vehicle (metres / degrees).
SPECTATOR_BACK  = 7.0
SPECTATOR_UP    = 3.0
SPECTATOR_PITCH = -10.0


@dataclass
class ScenarioConfig:
    """Everything one run of the drive-forward scenario needs."""
    host:                str   = DEFAULT_HOST
    port:                int   = DEFAULT_PORT
    timeout:             float = DEFAULT_TIMEOUT
    preferred_blueprint: str   = PREFERRED_BLUEPRINT
    fallback_pattern:    str   = FALLBACK_PATTERN
    ticks:               int   = TICKS
    step:                float = STEP_SECONDS
    throttle:            float = THROTTLE
    spawn_settle:        float = SPAWN_SETTLE_S
    brake_settle:        float = BRAKE_SETTLE_S
    spectator_back:      float = SPECTATOR_BACK
    spectator_up:        float = SPECTATOR_UP
    spectator_pitch:     float = SPECTATOR_PITCH
    destroy_remote:      bool  = False
    verbose:             bool  = False

    def __post_init__(self):
        if self.ticks < 0:
            raise ValueError(f"ticks must be >= 0, got {self.ticks}")
        if self.step < 0 or self.spawn_settle < 0 or self.brake_settle < 0:
            raise ValueError("step and settle delays must be >= 0")
        if not 0 < self.port < 65536:
            raise ValueError(f"port out of range: {self.port}")
