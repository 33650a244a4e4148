"""SimDrive: scripted single-vehicle client for a remote simulation server."""

from .client import SimClient, connect
from .config import ScenarioConfig
from .errors import (
    CallTimeoutError,
    NoBlueprintsFoundError,
    NoSpawnPointsError,
    RemoteCallError,
    ServerConnectionError,
    SimulatorError,
    SpawnError,
    TypeMismatchError,
)
from .scenario import run_scenario

__version__ = "0.1.0"
