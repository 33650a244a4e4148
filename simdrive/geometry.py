"""
Pose value types and the trailing-camera computation.

Angles are degrees. The forward vector follows the server's left-handed,
Z-up convention: yaw turns about Z starting from +X, positive pitch tilts
the nose up.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Dict


# ─── Value types ───────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Vector3D:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Vector3D":
        return cls(float(data.get("x", 0.0)), float(data.get("y", 0.0)), float(data.get("z", 0.0)))

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def __add__(self, other: "Vector3D") -> "Vector3D":
        return type(self)(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3D") -> "Vector3D":
        return type(self)(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, k: float) -> "Vector3D":
        return type(self)(self.x * k, self.y * k, self.z * k)


class Location(Vector3D):
    """A point in world space (metres)."""

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"


@dataclass(frozen=True)
class Rotation:
    pitch: float = 0.0
    yaw:   float = 0.0
    roll:  float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rotation":
        return cls(float(data.get("pitch", 0.0)), float(data.get("yaw", 0.0)), float(data.get("roll", 0.0)))

    def to_dict(self) -> Dict[str, float]:
        return {"pitch": self.pitch, "yaw": self.yaw, "roll": self.roll}


@dataclass(frozen=True)
class Transform:
    """A pose: location plus rotation."""
    location: Location = Location()
    rotation: Rotation = Rotation()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transform":
        return cls(
            location=Location.from_dict(data.get("location", {})),
            rotation=Rotation.from_dict(data.get("rotation", {})),
        )

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {"location": self.location.to_dict(), "rotation": self.rotation.to_dict()}

    def get_forward_vector(self) -> Vector3D:
        return forward_vector(self.rotation)


# ─── Derived geometry ──────────────────────────────────────────────────────
def forward_vector(rotation: Rotation) -> Vector3D:
    """Unit vector the rotation points along."""
    p = math.radians(rotation.pitch)
    y = math.radians(rotation.yaw)
    return Vector3D(math.cos(p) * math.cos(y), math.cos(p) * math.sin(y), math.sin(p))


def compute_trailing_pose(
    subject: Transform,
    back_offset: float,
    up_offset: float,
    pitch_down: float,
) -> Transform:
    """
    Pose for a viewpoint parked behind and above `subject`.

    The location moves `back_offset` along the subject's backward direction and
    `up_offset` along world Z. The rotation keeps the subject's yaw and roll and
    replaces its pitch with `pitch_down`.
    """
    f = forward_vector(subject.rotation)
    loc = subject.location
    location = Location(
        loc.x - f.x * back_offset,
        loc.y - f.y * back_offset,
        loc.z - f.z * back_offset + up_offset,
    )
    return Transform(location, replace(subject.rotation, pitch=pitch_down))
