"""
Rock-Paper-Scissors scoreboard referee using Google Gemini.

This is the main entry point. It loads settings, opens the saved game and runs
either the Gemini referee loop or a plain console loop (--offline).
"""

import argparse
import logging
import os
import time
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv
from google import genai
from google.genai import types

from session import GameSession
from state import CHOICE_EMOJIS, CHOICE_NAMES, RESULT_LABELS, RESULT_MESSAGES
from storage import JsonFileStore, PersistenceGateway
from tools import describe_round, get_game_summary, validate_move

logger = logging.getLogger(__name__)


# System prompt for the agent
SYSTEM_PROMPT = """You are a Rock-Paper-Scissors scoreboard referee.

GAME RULES (explain these briefly at start):
- The player plays as many rounds as they like against a bot
- Valid moves: rock, paper, scissors
- Rock beats scissors, scissors beats paper, paper beats rock
- Points: win = 3, tie = 1, loss = 0
- The last 10 rounds are kept as recent history

YOUR RESPONSIBILITIES:
1. Explain rules in ≤5 lines at game start
2. Prompt user for their move each round
3. Call validate_move to check user input
4. If valid, call play_round to get the bot move and the result
5. Call get_statistics or get_history when the user asks for their score or recent games
6. Call reset_all only when the user explicitly asks to reset
7. Provide clear feedback after each round:
   - User's move
   - Bot's move
   - Result and points earned
   - Current points and win rate

CRITICAL RULES:
- NEVER decide winners yourself - always use the play_round tool
- NEVER track state in conversation - state lives in the game session
- Never make up scores; read them from tool results

Be concise, friendly, and clear. Keep responses short."""

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_STATE_FILE = "rps_state.json"
DEFAULT_REVEAL_DELAY = 0.5


@dataclass
class Settings:
    api_key: Optional[str]
    model_name: str
    state_file: str
    reveal_delay: float
    log_level: str


def load_settings() -> Settings:
    """Read settings from the environment (and a .env file, if present)."""
    load_dotenv()

    raw_delay = os.getenv("RPS_REVEAL_DELAY", str(DEFAULT_REVEAL_DELAY))
    try:
        reveal_delay = max(0.0, float(raw_delay))
    except ValueError:
        logger.warning("Invalid RPS_REVEAL_DELAY %r, using %s", raw_delay, DEFAULT_REVEAL_DELAY)
        reveal_delay = DEFAULT_REVEAL_DELAY

    return Settings(
        api_key=os.getenv("GOOGLE_API_KEY"),
        model_name=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        state_file=os.getenv("RPS_STATE_FILE", DEFAULT_STATE_FILE),
        reveal_delay=reveal_delay,
        log_level=os.getenv("RPS_LOG_LEVEL", "WARNING").upper(),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def open_session(settings: Settings) -> GameSession:
    return GameSession(PersistenceGateway(JsonFileStore(settings.state_file)))


def create_agent(api_key: str):
    """
    Create the Gemini client used by the referee.

    Args:
        api_key: Google API key for Gemini

    Returns:
        Configured client
    """
    client = genai.Client(api_key=api_key)
    return client


def round_to_dict(record) -> dict:
    return {
        "user_move": record.player_choice.value,
        "bot_move": record.opponent_choice.value,
        "result": record.outcome.value,
        "message": RESULT_MESSAGES[record.outcome],
        "points_earned": record.points_earned,
        "timestamp": record.occurred_at,
    }


def stats_to_dict(session: GameSession) -> dict:
    stats = session.get_statistics()
    return dict(stats.to_dict(), win_rate=stats.win_rate)


def execute_tool_call(tool_name: str, args: dict, session: GameSession) -> dict:
    """
    Execute a tool call and return the result.

    Args:
        tool_name: Name of the tool to execute
        args: Tool arguments
        session: Current game session

    Returns:
        Tool execution result
    """
    if tool_name == "validate_move":
        return validate_move(args.get("user_input", ""))

    elif tool_name == "play_round":
        try:
            record = session.play_round(args.get("user_move", ""))
        except ValueError as e:
            return {"error": str(e)}
        return {
            "round": round_to_dict(record),
            "statistics": stats_to_dict(session)
        }

    elif tool_name == "get_statistics":
        return {"statistics": stats_to_dict(session)}

    elif tool_name == "get_history":
        return {"history": [round_to_dict(r) for r in session.get_history()]}

    elif tool_name == "reset_all":
        session.reset_all()
        return {
            "success": True,
            "statistics": stats_to_dict(session)
        }

    else:
        return {"error": f"Unknown tool: {tool_name}"}


# Define tools
def get_tools():
    """Define tools using correct SDK types."""
    return [types.Tool(
        function_declarations=[
            types.FunctionDeclaration(
                name="validate_move",
                description="Validate user input and check that it is a legal move (rock, paper or scissors)",
                parameters={
                    "type": "object",
                    "properties": {
                        "user_input": {
                            "type": "string",
                            "description": "Raw user input to validate"
                        }
                    },
                    "required": ["user_input"]
                }
            ),
            types.FunctionDeclaration(
                name="play_round",
                description="Choose the bot move, decide the result and update the scoreboard. This tool contains all game logic.",
                parameters={
                    "type": "object",
                    "properties": {
                        "user_move": {
                            "type": "string",
                            "description": "Validated user move (rock/paper/scissors)"
                        }
                    },
                    "required": ["user_move"]
                }
            ),
            types.FunctionDeclaration(
                name="get_statistics",
                description="Get the player's wins, losses, ties, games played, points and win rate.",
            ),
            types.FunctionDeclaration(
                name="get_history",
                description="Get the player's most recent rounds, newest first (at most 10).",
            ),
            types.FunctionDeclaration(
                name="reset_all",
                description="Reset all statistics and history. Only call when the user explicitly asks.",
            )
        ]
    )]


def _generate(client, model_name: str, messages: list, tool_definitions: list):
    return client.models.generate_content(
        model=model_name,
        contents=messages,
        config=types.GenerateContentConfig(
            system_instruction=SYSTEM_PROMPT,
            tools=tool_definitions,
            temperature=0.7
        )
    )


def reveal_pause(delay: float) -> None:
    """Cosmetic pause before a result is shown; the result is already decided."""
    if delay > 0:
        print("🤖 Bot is thinking...")
        time.sleep(delay)


def read_command(prompt: str) -> Optional[str]:
    """Read a line from the player; None when input ends (Ctrl-D, Ctrl-C, closed pipe)."""
    try:
        return input(prompt).strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return None


def _split_parts(response):
    """Return (function_calls, text) for a model response, or None if it has no content."""
    if not response.candidates or not response.candidates[0].content or not response.candidates[0].content.parts:
        logger.warning(
            "Response has no candidates or parts. Finish reason: %s",
            response.candidates[0].finish_reason if response.candidates else "N/A"
        )
        return None

    calls = [part.function_call for part in response.candidates[0].content.parts if part.function_call]
    text = " ".join(part.text for part in response.candidates[0].content.parts if part.text)
    return calls, text


def _answer_calls(calls, session: GameSession, reveal_delay: float) -> list:
    """Run the requested tools and build the function_response parts."""
    parts = []
    for fc in calls:
        args = dict(fc.args) if fc.args else {}
        result = execute_tool_call(fc.name, args, session)
        logger.debug("Tool %s(%s) -> %s", fc.name, args, result)
        if fc.name == "play_round" and "round" in result:
            reveal_pause(reveal_delay)
        parts.append({"function_response": {"name": fc.name, "response": result}})
    return parts


def _handle_turn(client, settings: Settings, session: GameSession, messages: list, tool_definitions: list) -> None:
    """Let the referee answer one player message, running tools until it replies in text."""
    response = _generate(client, settings.model_name, messages, tool_definitions)

    while True:
        split = _split_parts(response)
        if split is None:
            return
        calls, text = split

        if text:
            print(f"\nReferee: {text}\n")
        if not calls:
            if text:
                messages.append({"role": "model", "parts": [{"text": text}]})
            return

        model_parts = [{"text": text}] if text else []
        model_parts.extend({"function_call": {"name": fc.name, "args": fc.args}} for fc in calls)
        messages.append({"role": "model", "parts": model_parts})
        messages.append({"role": "user", "parts": _answer_calls(calls, session, settings.reveal_delay)})

        response = _generate(client, settings.model_name, messages, tool_definitions)


def run_game(settings: Settings) -> int:
    """Gemini referee loop."""
    if not settings.api_key:
        print("Error: GOOGLE_API_KEY environment variable not set")
        print("Please add it to your .env file, or run with --offline")
        return 1

    client = create_agent(settings.api_key)
    session = open_session(settings)
    tool_definitions = get_tools()

    print("=" * 60)
    print("ROCK-PAPER-SCISSORS SCOREBOARD REFEREE")
    print("=" * 60)
    print("Type 'quit' to leave.")

    messages = [{"role": "user", "parts": [{"text": "Greet me and explain the rules briefly."}]}]

    try:
        _handle_turn(client, settings, session, messages, tool_definitions)

        while True:
            user_input = read_command("You: ")
            if user_input is None or user_input.lower() in ("quit", "exit"):
                break
            if not user_input:
                continue

            messages.append({"role": "user", "parts": [{"text": user_input}]})
            _handle_turn(client, settings, session, messages, tool_definitions)

        print(get_game_summary(session.state))

    except Exception as e:
        print(f"\nError occurred: {e}")
        import traceback
        traceback.print_exc()
        return 1

    return 0


def run_console(settings: Settings, session: Optional[GameSession] = None) -> int:
    """Plain console loop that needs no API key."""
    session = session if session is not None else open_session(settings)

    print("=" * 60)
    print("🎮 ROCK PAPER SCISSORS")
    print("=" * 60)
    print("Play against the bot and earn points! Win = 3, Tie = 1, Loss = 0.")
    print("Commands: rock, paper, scissors, stats, history, reset, quit")

    while True:
        user_input = read_command("\nYour move: ")
        if user_input is None:
            break
        user_input = user_input.lower()

        if not user_input:
            continue
        if user_input in ("quit", "exit"):
            break
        if user_input == "stats":
            print(get_game_summary(session.state))
            continue
        if user_input == "history":
            if not session.get_history():
                print("No games played yet.")
            for record in session.get_history():
                print(
                    f"  {CHOICE_EMOJIS[record.player_choice]} {CHOICE_NAMES[record.player_choice]} vs "
                    f"{CHOICE_EMOJIS[record.opponent_choice]} {CHOICE_NAMES[record.opponent_choice]}"
                    f" → {RESULT_LABELS[record.outcome]}"
                )
            continue
        if user_input == "reset":
            session.reset_all()
            print("Statistics and history cleared.")
            continue

        check = validate_move(user_input)
        if not check["valid"]:
            print(check["reason"])
            continue

        record = session.play_round(check["move"])
        reveal_pause(settings.reveal_delay)
        print(describe_round(record))
        stats = session.get_statistics()
        print(f"Points: {stats.points} | Win rate: {stats.win_rate}%")

    print(get_game_summary(session.state))
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="rps", description="Play Rock-Paper-Scissors against a bot and keep score.")
    p.add_argument("--offline", action="store_true", help="Play in the console without the Gemini referee")
    p.add_argument("--state-file", help="Where to save statistics and history (overrides RPS_STATE_FILE)")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    if args.state_file:
        settings.state_file = args.state_file
    configure_logging(settings.log_level)

    if args.offline:
        return run_console(settings)
    return run_game(settings)


if __name__ == "__main__":
    raise SystemExit(main())
