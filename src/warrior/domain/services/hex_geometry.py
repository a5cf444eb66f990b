from __future__ import annotations

from warrior.domain.models.hex import HEX_DIRECTIONS, ORIGIN, Hex


def hex_distance(a: Hex, b: Hex) -> int:
    return (abs(a.q - b.q) + abs(a.r - b.r) + abs((a.q + a.r) - (b.q + b.r))) // 2


def distance_from_origin(hex_coord: Hex) -> int:
    return hex_distance(hex_coord, ORIGIN)


def direction_for_index(index: int) -> Hex:
    return HEX_DIRECTIONS[int(index) % len(HEX_DIRECTIONS)]


def neighbors(hex_coord: Hex) -> list[Hex]:
    return [hex_coord.offset(direction) for direction in HEX_DIRECTIONS]


def step_toward(origin: Hex, target: Hex) -> Hex:
    """Single greedy step from ``origin`` toward ``target``.

    Candidates are visited in ``HEX_DIRECTIONS`` order and a candidate only
    replaces the current best when strictly closer, so equal-distance ties
    resolve to the earlier direction. Returns ``origin`` when already there.
    """
    best = origin
    best_distance = hex_distance(origin, target)
    for direction in HEX_DIRECTIONS:
        candidate = origin.offset(direction)
        distance = hex_distance(candidate, target)
        if distance < best_distance:
            best = candidate
            best_distance = distance
    return best
