from __future__ import annotations


class RoomError(Exception):
    """A join/create failure reported to the requesting connection only."""

    code = "room_error"
    message = "خطأ في الغرفة"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_payload(self) -> dict:
        return {"error": self.code, "message": self.message}


class RoomNotFound(RoomError):
    code = "room_not_found"
    message = "الغرفة غير موجودة"


class GameAlreadyStarted(RoomError):
    code = "game_already_started"
    message = "اللعبة بدأت بالفعل"


class RoomFull(RoomError):
    code = "room_full"
    message = "الغرفة ممتلئة"


class InvalidPayload(RoomError):
    code = "invalid_payload"
    message = "بيانات غير صالحة"


class RoomCodeExhausted(RuntimeError):
    """No free room code was found within the configured number of attempts."""
