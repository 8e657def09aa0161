# ABOUTME: Prompt templates for action generation: primitives preamble, game rules and corrections.
# ABOUTME: The reply contract is a raw JSON array of actions with no markdown fences.

from board_moderator.models.game_definition import GameRules

RULES_PREAMBLE = """You are a voice-only board game moderator. Players move physical pieces and roll real dice; they never see a screen. All interaction is voice in, voice out.

Players usually INFORM you of what happened ("I rolled a 3", "I'll take the left path"). Interpret it, update the game state and narrate the result.

Respond with a JSON array of actions. Each action must be one of:

1. PLAYER_ROLLED - The current player reports their dice roll (moves them and records game.lastRoll)
   {"action": "PLAYER_ROLLED", "value": 4}

2. PLAYER_ANSWERED - The current player answers a question (recorded in game.lastAnswer)
   {"action": "PLAYER_ANSWERED", "answer": "left"}

3. SET_STATE - Set a value at an existing path
   {"action": "SET_STATE", "path": "players.p1.pathChoice", "value": "left"}

4. ADD_STATE / SUBTRACT_STATE - Change a numeric value
   {"action": "ADD_STATE", "path": "players.p1.hearts", "value": 1}

5. READ_STATE - Read a value (rarely needed)
   {"action": "READ_STATE", "path": "game.turn"}

6. NARRATE - Speak to the players (ALWAYS narrate, this is voice-only)
   {"action": "NARRATE", "text": "Alice climbs to square 12!", "soundEffect": "optional_sound"}

7. ROLL_DICE - Moderator roll for NPCs or random picks only, never for players
   {"action": "ROLL_DICE", "die": "1d6"}

8. RESET_GAME - Start over
   {"action": "RESET_GAME", "keepPlayerNames": true}

Rules you must follow:
- Paths use dot notation: "players.p1.position", "game.lastRoll"
- Only change the record of the player whose turn it is (game.turn)
- Never set game.turn or game.phase; turns advance automatically
- Snakes, ladders and other board moves are applied automatically after a move
- If a player stands on a decision point, set the required field before moving them
- ALWAYS NARRATE what happens

Return ONLY the JSON array, with no markdown fences and no other text:
[{"action": "PLAYER_ROLLED", "value": 3}, {"action": "NARRATE", "text": "Alice moves to square 7!"}]"""


CORRECTION_TEMPLATE = """Your previous reply was rejected: {feedback}
Fix the problem and reply again with a valid JSON array of actions."""


def format_game_rules(rules: GameRules, game_name: str | None = None) -> str:
    """
    Render a game's free-text rules for the system prompt.

    Args:
        rules: Rules section of the game definition
        game_name: Optional display name of the game

    Returns:
        Rules block with objective, mechanics and optional sections
    """
    header = f"GAME RULES: {game_name}" if game_name else "GAME RULES"
    sections = [
        header,
        f"Objective: {rules.objective}",
        f"Mechanics: {rules.mechanics}",
    ]
    if rules.turn_structure:
        sections.append(f"Turn structure: {rules.turn_structure}")
    if rules.board_layout:
        sections.append(f"Board layout: {rules.board_layout}")
    if rules.examples:
        sections.append("Examples:\n" + "\n".join(f"- {example}" for example in rules.examples))
    return "\n\n".join(sections)


def build_system_prompt(game_rules: str) -> str:
    """Combine the primitives preamble with game-specific rules"""
    return f"{RULES_PREAMBLE}\n\n{game_rules}"


def build_user_prompt(
    state_context: str,
    transcript: str,
    feedback: str | None = None,
    notes: list[str] | None = None,
) -> str:
    """
    Build the per-request message.

    Args:
        state_context: Rendered state block
        transcript: User or system transcript
        feedback: Rejection reason from the previous attempt, if any
        notes: Informational context lines (e.g., other players' open decisions)

    Returns:
        Message text sent after the system prompt
    """
    parts = [state_context]
    if notes:
        parts.append("\n".join(notes))
    parts.append(f'User Command: "{transcript}"')
    if feedback:
        parts.append(CORRECTION_TEMPLATE.format(feedback=feedback))
    return "\n\n".join(parts)
