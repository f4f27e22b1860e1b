from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Mapping

from .clock import TurnClock


@dataclass
class GameSettings:
    turn_duration_sec: int = 80
    max_rounds: int = 3
    max_players: int = 8
    min_players: int = 2
    guess_grace_sec: float = 2.0
    chat_snapshot_limit: int = 50
    room_code_length: int = 6
    room_code_attempts: int = 10
    redact_word: bool = True

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> GameSettings:
        defaults = cls()
        return cls(
            turn_duration_sec=int(config.get("TURN_DURATION_SEC", defaults.turn_duration_sec)),
            max_rounds=int(config.get("MAX_ROUNDS", defaults.max_rounds)),
            max_players=int(config.get("MAX_PLAYERS", defaults.max_players)),
            min_players=int(config.get("MIN_PLAYERS", defaults.min_players)),
            guess_grace_sec=float(config.get("GUESS_GRACE_SEC", defaults.guess_grace_sec)),
            chat_snapshot_limit=int(config.get("CHAT_SNAPSHOT_LIMIT", defaults.chat_snapshot_limit)),
            room_code_length=int(config.get("ROOM_CODE_LENGTH", defaults.room_code_length)),
            room_code_attempts=int(config.get("ROOM_CODE_ATTEMPTS", defaults.room_code_attempts)),
            redact_word=bool(config.get("REDACT_WORD", defaults.redact_word)),
        )


@dataclass
class Player:
    id: str
    name: str
    score: int = 0
    is_drawing: bool = False
    has_guessed: bool = False


@dataclass
class ChatMessage:
    player_id: str
    player_name: str
    text: str
    timestamp_ms: int
    is_guess_attempt: bool = False
    is_correct_guess: bool = False
    # Text equals the word that was live when it was sent; never sent out verbatim.
    reveals_word: bool = False

    def to_payload(self) -> dict:
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "message": None if self.reveals_word else self.text,
            "timestamp": self.timestamp_ms,
            "isGuess": self.is_guess_attempt,
            "isCorrect": self.is_correct_guess,
        }


@dataclass
class Room:
    id: str
    settings: GameSettings = field(default_factory=GameSettings)
    players: list[Player] = field(default_factory=list)
    current_drawer_id: str | None = None
    current_word: str | None = None
    time_left: int = 0
    round: int = 1
    started: bool = False
    ended: bool = False
    turn: int = 0
    strokes: list[Any] = field(default_factory=list)
    chat_log: list[ChatMessage] = field(default_factory=list)
    clock: TurnClock | None = field(default=None, repr=False, compare=False)
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    @property
    def max_rounds(self) -> int:
        return self.settings.max_rounds

    @property
    def in_turn(self) -> bool:
        return self.started and not self.ended

    def get_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None
