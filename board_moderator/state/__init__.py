# ABOUTME: State layer exports for the path-addressable game document.
# ABOUTME: Provides StateStore, get/set-by-path helpers and roster building from the player template.

from board_moderator.state.roster import build_roster, player_template, roster_names
from board_moderator.state.store import (
    MISSING,
    StateStore,
    get_by_path,
    path_exists,
    set_by_path,
    split_path,
)

__all__ = [
    "MISSING",
    "StateStore",
    "build_roster",
    "get_by_path",
    "path_exists",
    "player_template",
    "roster_names",
    "set_by_path",
    "split_path",
]
