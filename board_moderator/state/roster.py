# ABOUTME: Builds player records from the game's initial state template.
# ABOUTME: Used at setup (names collected by the interface) and when a reset keeps player names.

import copy
from typing import Any

DEFAULT_PLAYER_TEMPLATE: dict[str, Any] = {"name": "", "position": 0}


def player_template(initial_state: dict[str, Any]) -> dict[str, Any]:
    """
    Return the record new players are cloned from.

    An explicit top-level "playerTemplate" wins; otherwise the first player
    record of the initial state is used.
    """
    explicit = initial_state.get("playerTemplate")
    if isinstance(explicit, dict):
        return copy.deepcopy(explicit)

    players = initial_state.get("players") or {}
    for record in players.values():
        if isinstance(record, dict):
            return copy.deepcopy(record)
    return copy.deepcopy(DEFAULT_PLAYER_TEMPLATE)


def build_roster(
    initial_state: dict[str, Any],
    names: list[str],
) -> tuple[dict[str, dict[str, Any]], list[str]]:
    """
    Create p1..pN player records.

    Args:
        initial_state: Game definition's initial state
        names: Player names in play order

    Returns:
        Tuple of (players mapping, player order)
    """
    template = player_template(initial_state)
    players: dict[str, dict[str, Any]] = {}
    order: list[str] = []
    for number, name in enumerate(names, start=1):
        player_id = f"p{number}"
        record = copy.deepcopy(template)
        record["id"] = player_id
        record["name"] = name
        record.setdefault("position", 0)
        players[player_id] = record
        order.append(player_id)
    return players, order


def roster_names(state: dict[str, Any]) -> list[str]:
    """Names of the current players in play order, skipping unnamed records"""
    players = state.get("players") or {}
    order = (state.get("game") or {}).get("playerOrder") or list(players)
    names = []
    for player_id in order:
        name = (players.get(player_id) or {}).get("name")
        if name:
            names.append(name)
    return names
