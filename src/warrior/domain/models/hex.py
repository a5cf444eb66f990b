from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Hex:
    """Axial hex coordinate; the cube third axis is ``s = -q - r``."""

    q: int = 0
    r: int = 0

    @property
    def s(self) -> int:
        return -self.q - self.r

    def offset(self, direction: "Hex", steps: int = 1) -> "Hex":
        return Hex(q=self.q + direction.q * steps, r=self.r + direction.r * steps)

    def to_dict(self) -> dict[str, int]:
        return {"q": int(self.q), "r": int(self.r)}


ORIGIN = Hex(0, 0)

# Enumeration order matters: greedy stepping keeps the first improving neighbour.
HEX_DIRECTIONS: tuple[Hex, ...] = (
    Hex(1, 0),
    Hex(-1, 0),
    Hex(0, 1),
    Hex(0, -1),
    Hex(1, -1),
    Hex(-1, 1),
)
