from dataclasses import dataclass, field
from typing import List, Optional

from warrior.domain.events import SimulationEvent
from warrior.domain.models.state import SimulationState


@dataclass
class TickResult:
    state: SimulationState
    events: List[SimulationEvent] = field(default_factory=list)
    steps: int = 1
    alpha: float = 0.0


@dataclass(frozen=True)
class OfflineReport:
    away_seconds: int
    passive_essence_gain: int
    flow_essence_spent: int


@dataclass
class OfflineResult:
    state: SimulationState
    report: Optional[OfflineReport] = None
    events: List[SimulationEvent] = field(default_factory=list)


@dataclass
class LoadResult:
    state: SimulationState
    offline_report: Optional[OfflineReport] = None
    source: str = "new"
    offline_events: List[SimulationEvent] = field(default_factory=list)
