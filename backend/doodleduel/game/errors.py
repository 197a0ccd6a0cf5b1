from __future__ import annotations


class GameError(Exception):
    """Base class for room-level failures.

    ``user_facing`` errors are reported back to the triggering connection;
    the rest are expected client/server timing races and fail closed.
    """

    code = "game_error"
    default_message = "Game error."
    user_facing = False

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class RoomNotFound(GameError):
    code = "room_not_found"
    default_message = "Room not found."
    user_facing = True


class NameTaken(GameError):
    code = "name_taken"
    default_message = "A player with this name is already active in this room."
    user_facing = True


class InsufficientPlayers(GameError):
    code = "insufficient_players"
    default_message = "Not enough players to start a round."
    user_facing = True


class NotAuthorized(GameError):
    code = "not_authorized"
    default_message = "Not allowed."


class InvalidPhase(GameError):
    code = "invalid_phase"
    default_message = "Not allowed right now."


class ClassifierUnavailable(GameError):
    code = "classifier_unavailable"
    default_message = "Scribble classifier unavailable."
