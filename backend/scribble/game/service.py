from __future__ import annotations

import logging
import time
from typing import Any

from .models import ChatMessage, Player, Room
from .words import normalize_guess, pick_word

logger = logging.getLogger(__name__)

GUESSER_MIN_POINTS = 20
DRAWER_POINTS = 10


def now_ms() -> int:
    return int(time.time() * 1000)


def add_player(room: Room, player_id: str, name: str) -> Player | None:
    with room.lock:
        if room.get_player(player_id) is not None:
            return None
        if len(room.players) >= room.settings.max_players:
            return None
        player = Player(id=player_id, name=name)
        room.players.append(player)
        return player


def start_game(room: Room) -> bool:
    """Lobby -> first turn. Returns False (and changes nothing) when not allowed."""
    with room.lock:
        if room.started:
            return False
        if len(room.players) < room.settings.min_players:
            return False

        room.started = True
        room.round = 1
        room.current_drawer_id = None
        advance_turn(room)
        logger.info("[game-start] room=%s players=%d", room.id, len(room.players))
        return True


def advance_turn(room: Room) -> None:
    with room.lock:
        if room.ended or not room.players:
            return

        for p in room.players:
            p.is_drawing = False
            p.has_guessed = False

        # A drawer who already left counts as index -1, so rotation restarts at 0.
        current_index = -1
        for idx, p in enumerate(room.players):
            if p.id == room.current_drawer_id:
                current_index = idx
                break
        next_index = (current_index + 1) % len(room.players)

        next_round = room.round
        if next_index == 0 and room.current_drawer_id is not None:
            next_round += 1

        if next_round > room.max_rounds:
            end_game(room)
            return

        drawer = room.players[next_index]
        drawer.is_drawing = True
        room.round = next_round
        room.current_drawer_id = drawer.id
        room.current_word = pick_word(exclude=room.current_word)
        room.time_left = room.settings.turn_duration_sec
        room.strokes = []
        room.turn += 1

        if room.clock is not None:
            room.clock.restart()

        logger.info(
            "[turn] room=%s turn=%d round=%d/%d drawer=%s",
            room.id,
            room.turn,
            room.round,
            room.max_rounds,
            drawer.id,
        )


def end_game(room: Room) -> None:
    with room.lock:
        if room.clock is not None:
            room.clock.cancel()
        for p in room.players:
            p.is_drawing = False
        room.players.sort(key=lambda p: p.score, reverse=True)
        room.current_drawer_id = None
        room.time_left = 0
        room.ended = True
        logger.info(
            "[game-end] room=%s standings=%s",
            room.id,
            [(p.name, p.score) for p in room.players],
        )


def tick(room: Room) -> bool:
    """One second of turn time. Returns True when the turn advanced (or the game ended)."""
    with room.lock:
        if not room.in_turn:
            return False
        room.time_left -= 1
        if room.time_left <= 0:
            logger.info("[turn-timeout] room=%s turn=%d", room.id, room.turn)
            advance_turn(room)
            return True
        return False


def everyone_guessed(room: Room) -> bool:
    with room.lock:
        if not room.in_turn:
            return False
        guessers = [p for p in room.players if not p.is_drawing]
        return bool(guessers) and all(p.has_guessed for p in guessers)


def submit_chat(room: Room, player_id: str, text: str) -> ChatMessage | None:
    with room.lock:
        player = room.get_player(player_id)
        if player is None:
            return None
        if not isinstance(text, str) or not text.strip():
            return None

        live_word = room.current_word if room.in_turn else None
        eligible = live_word is not None and not player.is_drawing and not player.has_guessed
        matches = live_word is not None and normalize_guess(text) == normalize_guess(live_word)

        msg = ChatMessage(
            player_id=player.id,
            player_name=player.name,
            text=text,
            timestamp_ms=now_ms(),
            is_guess_attempt=eligible,
            reveals_word=matches,
        )

        if eligible and matches:
            msg.is_correct_guess = True
            player.has_guessed = True
            player.score += max(GUESSER_MIN_POINTS, room.time_left)

            drawer = room.get_player(room.current_drawer_id) if room.current_drawer_id else None
            if drawer is not None:
                drawer.score += DRAWER_POINTS

            logger.info(
                "[guess-correct] room=%s turn=%d player=%s time_left=%d",
                room.id,
                room.turn,
                player.id,
                room.time_left,
            )

        room.chat_log.append(msg)
        return msg


def submit_stroke(room: Room, player_id: str, stroke: Any) -> bool:
    with room.lock:
        if not room.in_turn or player_id != room.current_drawer_id:
            return False
        room.strokes.append(stroke)
        return True


def clear_canvas(room: Room, player_id: str) -> bool:
    with room.lock:
        if not room.in_turn or player_id != room.current_drawer_id:
            return False
        room.strokes = []
        return True


def remove_player(room: Room, player_id: str) -> Player | None:
    with room.lock:
        player = room.get_player(player_id)
        if player is None:
            return None

        room.players.remove(player)

        if not room.players:
            if room.clock is not None:
                room.clock.cancel()
            return player

        if room.in_turn and room.current_drawer_id == player_id:
            # The abandoned word is dropped; the next drawer gets a fresh one.
            advance_turn(room)

        return player


def get_state(room: Room) -> dict:
    with room.lock:
        limit = room.settings.chat_snapshot_limit
        return {
            "id": room.id,
            "players": [
                {
                    "id": p.id,
                    "name": p.name,
                    "score": p.score,
                    "isDrawing": p.is_drawing,
                    "hasGuessed": p.has_guessed,
                }
                for p in room.players
            ],
            "currentDrawer": room.current_drawer_id,
            "currentWord": room.current_word,
            "wordLength": len(room.current_word) if room.current_word else 0,
            "timeLeft": room.time_left,
            "round": room.round,
            "maxRounds": room.max_rounds,
            "gameStarted": room.started,
            "gameEnded": room.ended,
            "drawingData": list(room.strokes),
            "chatHistory": [m.to_payload() for m in room.chat_log[-limit:]] if limit > 0 else [],
        }


def room_view(state: dict, viewer_id: str | None = None, redact: bool = True) -> dict:
    """Project a snapshot for one recipient. Only the drawer sees the live word."""
    if not redact or state.get("gameEnded"):
        return state
    if viewer_id is not None and viewer_id == state.get("currentDrawer"):
        return state
    view = dict(state)
    view["currentWord"] = None
    return view
