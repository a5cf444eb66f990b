from __future__ import annotations

import random
from collections import Counter
from typing import Iterable, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from warrior.application.dtos import OfflineReport
from warrior.application.services.fixed_step import FixedStepDriver
from warrior.application.services.progression_service import max_hp, max_ki, normalize_flow_rates
from warrior.application.services.save_service import SOURCE_ERROR, SaveService
from warrior.application.services.simulation_service import set_activity_mode, set_flow_rates
from warrior.domain.events import SimulationEvent
from warrior.domain.models.config import GameConfig
from warrior.domain.models.state import CULTIVATION_STATS, ActivityMode, SimulationState

_BORDER_OFFLINE = "cyan"
_BORDER_SUMMARY = "yellow"
_BORDER_EVENTS = "magenta"


def render_offline_report(report: Optional[OfflineReport], console: Console) -> None:
    if report is None:
        return
    table = Table.grid(padding=(0, 1))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")
    table.add_row("Away", f"{report.away_seconds}s")
    table.add_row("Essence gathered", str(report.passive_essence_gain))
    table.add_row("Essence cultivated", str(report.flow_essence_spent))
    console.print(Panel.fit(table, title="While you were away", border_style=_BORDER_OFFLINE))


def render_session_summary(
    state: SimulationState,
    events: Iterable[SimulationEvent],
    config: GameConfig,
    console: Console,
) -> None:
    run = state.run
    world = state.world
    statistics = state.statistics
    flow = normalize_flow_rates(state.cultivation)

    header = Table.grid(padding=(0, 1))
    header.add_column(style="bold yellow", justify="right")
    header.add_column(style="white")
    header.add_row("Mode", state.activity_mode.value.title())
    header.add_row("Depth", f"{world.travel_depth} (best {world.best_depth})")
    header.add_row("Hexes revealed", str(world.revealed_hexes))
    header.add_row("HP", f"{int(run.hp)}/{max_hp(run, config)}")
    header.add_row("Ki", f"{run.ki:.1f}/{max_ki(run, config):.1f}")
    header.add_row("Essence", f"{state.resources.essence:.0f}")
    header.add_row("Flow", f"body {flow.body:.2f} / mind {flow.mind:.2f} / spirit {flow.spirit:.2f}")
    if state.enemy is not None:
        enemy = state.enemy
        header.add_row(
            "Enemy",
            f"{enemy.rarity.name} foe of the {enemy.biome.name} ({enemy.hp}/{enemy.max_hp} HP)",
        )
    header.add_row("Deaths", str(statistics.total_deaths))
    header.add_row("Enemies defeated", str(statistics.total_enemies_defeated))
    console.print(Panel.fit(header, title="Warrior", border_style=_BORDER_SUMMARY))

    levels = Table(show_header=True, header_style="bold yellow")
    levels.add_column("Track")
    levels.add_column("Level", justify="right")
    levels.add_column("Prestige", justify="right")
    levels.add_row("Strength", str(run.strength_level), str(state.persistent.strength_prestige_level))
    levels.add_row("Endurance", str(run.endurance_level), str(state.persistent.endurance_prestige_level))
    for stat in CULTIVATION_STATS:
        levels.add_row(
            stat.title(),
            str(getattr(run, f"{stat}_level")),
            str(getattr(run, f"{stat}_prestige_level")),
        )
    console.print(levels)

    counts = Counter(event.name for event in events)
    if counts:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Event")
        table.add_column("Count", justify="right")
        for name, count in sorted(counts.items()):
            table.add_row(name, str(count))
        console.print(Panel.fit(table, title="This session", border_style=_BORDER_EVENTS))


def run_session(
    save_service: SaveService,
    config: GameConfig,
    *,
    seconds: float,
    mode: str = ActivityMode.BATTLE.value,
    flow: Sequence[float] | None = None,
    rng: random.Random | None = None,
    save: bool = True,
    console: Console | None = None,
) -> SimulationState:
    """Load, simulate ``seconds`` of play headlessly, report and save."""
    console = console or Console()
    loaded = save_service.load_game(config)
    if loaded.source == SOURCE_ERROR:
        console.print("[yellow]Saved game could not be read; starting a new run.[/yellow]")
    render_offline_report(loaded.offline_report, console)

    state = loaded.state
    if flow is not None:
        body, mind, spirit = flow
        state = set_flow_rates(state, body, mind, spirit)
    requested_mode = ActivityMode(mode)
    state = set_activity_mode(state, requested_mode)
    if state.activity_mode != requested_mode:
        console.print("[yellow]Cultivation unlocks after the first defeat; fighting instead.[/yellow]")

    driver = FixedStepDriver(config, on_autosave=save_service.save_game if save else None)
    result = driver.run_for(state, max(0.0, seconds) * 1000, rng)
    render_session_summary(result.state, list(loaded.offline_events) + result.events, config, console)

    if save:
        save_service.save_game(result.state)
    return result.state
