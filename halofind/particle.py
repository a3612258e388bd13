"""The simulation particle record."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Particle:
    """A particle: its identifier and phase-space coordinates (x, y, z, vx, vy, vz)."""

    id: int = 0
    pos: list[float] = field(default_factory=lambda: [0.0] * 6)

    def __post_init__(self) -> None:
        self.pos = [float(value) for value in self.pos]
        if len(self.pos) != 6:
            raise ValueError("a particle has exactly six phase-space coordinates")

    def position(self) -> tuple[float, float, float]:
        """The spatial coordinates."""
        return self.pos[0], self.pos[1], self.pos[2]

    def velocity(self) -> tuple[float, float, float]:
        """The velocity components."""
        return self.pos[3], self.pos[4], self.pos[5]