# ABOUTME: Compact, schema-driven rendering of the game state for the generation prompt.
# ABOUTME: Each field is shown always, only when set, or never, per the game's stateDisplay config.

import json
from typing import Any

from board_moderator.models.game_definition import DisplayMode

# Applied when the game definition does not mention a field
DEFAULT_DISPLAY: dict[str, DisplayMode] = {
    "game.phase": DisplayMode.ALWAYS,
    "game.turn": DisplayMode.ALWAYS,
    "game.playerOrder": DisplayMode.ALWAYS,
    "game.name": DisplayMode.NEVER,
    "players.id": DisplayMode.NEVER,
    "players.name": DisplayMode.NEVER,
    "players.position": DisplayMode.ALWAYS,
}

# Sections rendered only when a key opts in
HIDDEN_SECTIONS: tuple[str, ...] = ("board", "decisionPoints", "playerTemplate")


def _mode(display: dict[str, Any], key: str, fallback: DisplayMode) -> DisplayMode:
    raw = display.get(key, DEFAULT_DISPLAY.get(key, fallback))
    return DisplayMode(raw)


def _is_set(value: Any) -> bool:
    return value not in (None, "", [], {}, 0, False)


def _fmt(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), default=str)


def _render_fields(
    record: dict[str, Any],
    section: str,
    display: dict[str, Any],
) -> list[str]:
    parts = []
    for key, value in record.items():
        mode = _mode(display, f"{section}.{key}", DisplayMode.IF_SET)
        if mode == DisplayMode.NEVER:
            continue
        if mode == DisplayMode.IF_SET and not _is_set(value):
            continue
        parts.append(f"{key}={_fmt(value)}")
    return parts


def format_state_context(state: dict[str, Any], display: dict[str, Any] | None = None) -> str:
    """
    Render the state document as a few compact lines.

    Args:
        state: Game state document
        display: stateDisplay mapping ("game.<field>" / "players.<field>" -> mode)

    Returns:
        Multi-line text block for the prompt
    """
    display = display or {}
    lines = ["Current state:"]

    game = state.get("game") or {}
    game_fields = _render_fields(game, "game", display)
    if game_fields:
        lines.append("game: " + ", ".join(game_fields))

    players = state.get("players") or {}
    if players:
        lines.append("players:")
        for player_id, record in players.items():
            if not isinstance(record, dict):
                continue
            label = f"{player_id} ({record['name']})" if record.get("name") else player_id
            fields = _render_fields(record, "players", display)
            lines.append(f"- {label}: " + ", ".join(fields) if fields else f"- {label}")

    for section in HIDDEN_SECTIONS:
        if section not in state:
            continue
        value = state[section]
        if isinstance(value, dict):
            shown = {
                key: item for key, item in value.items()
                if _mode(display, f"{section}.{key}", DisplayMode.NEVER) == DisplayMode.ALWAYS
                or (
                    _mode(display, f"{section}.{key}", DisplayMode.NEVER) == DisplayMode.IF_SET
                    and _is_set(item)
                )
            }
            if shown:
                lines.append(f"{section}: {_fmt(shown)}")
        elif _mode(display, section, DisplayMode.NEVER) != DisplayMode.NEVER and _is_set(value):
            lines.append(f"{section}: {_fmt(value)}")

    return "\n".join(lines)
