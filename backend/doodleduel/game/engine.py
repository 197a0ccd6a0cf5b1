"""Room state machine.

One ``GameRoom`` per room. Every public operation and every timer callback
runs under the room's lock, so events for one room are applied one at a time.
Rooms share nothing with each other.

Round phases: idle -> choosing -> drawing -> ending -> idle. Game over is a
flag on top of idle.
"""

from __future__ import annotations

import functools
import logging
import random
import uuid
from collections.abc import Callable
from threading import RLock
from typing import Any, Protocol

from .classifier import ScribbleClassifier, ScribbleVerdict
from .drawing import Stroke
from .errors import ClassifierUnavailable, GameError, InsufficientPlayers, InvalidPhase, NameTaken, NotAuthorized, RoomNotFound
from .hints import can_reveal, pick_hint_index
from .masking import mask_word
from .matching import is_exact_match, near_miss_feedback
from .models import Message, Phase, Player, Room
from .settings import GameSettings
from .timers import Countdown, Scheduler, TimerHandle
from .words import WordBank


logger = logging.getLogger(__name__)

# Timers owned by the current phase; anything else (teardown) outlives phases.
ROUND_TIMERS = ("choose", "tick", "hint", "cooldown")


class Notifier(Protocol):
    def emit(self, event: str, payload: Any = None, *, to: str, skip_sid: str | None = None) -> None: ...


def room_operation(broadcast: bool = True):
    """Serialize an operation on the room and apply the failure policy.

    Silent errors (role or phase mismatches) leave the room untouched and
    emit nothing. User-facing errors propagate to the caller. Anything else
    is logged and swallowed.
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(self: "GameRoom", *args, **kwargs):
            with self._lock:
                if self._closed:
                    raise RoomNotFound()
                try:
                    result = fn(self, *args, **kwargs)
                except GameError as exc:
                    if exc.user_facing:
                        raise
                    logger.debug("room %s: %s rejected: %s", self.code, fn.__name__, exc)
                    return None
                except Exception:
                    logger.exception("room %s: %s failed", self.code, fn.__name__)
                    return None
                if broadcast:
                    self._broadcast_state()
                return result

        return wrapper

    return decorator


class GameRoom:
    def __init__(
        self,
        code: str,
        *,
        notifier: Notifier,
        scheduler: Scheduler,
        word_bank: WordBank,
        settings: GameSettings | None = None,
        classifier: ScribbleClassifier | None = None,
        on_empty: Callable[["GameRoom"], None] | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or GameSettings()
        self.state = Room(code=code, total_rounds=self.settings.default_total_rounds)
        self.countdown = Countdown(self.settings.round_duration_sec)

        self._notifier = notifier
        self._scheduler = scheduler
        self._word_bank = word_bank
        self._classifier = classifier
        self._on_empty = on_empty
        self._rng = rng or random.Random()

        self._lock = RLock()
        self._timers: dict[str, TimerHandle] = {}
        self._epoch = 0
        self._closed = False
        self._scribble_pending = False

    @property
    def code(self) -> str:
        return self.state.code

    @property
    def closed(self) -> bool:
        return self._closed

    def has_connection(self, sid: str) -> bool:
        with self._lock:
            return self.state.find_by_sid(sid) is not None

    def connected_count(self) -> int:
        with self._lock:
            return len(self.state.connected_players())

    def public_state(self) -> dict:
        with self._lock:
            return self._public_state()

    def _public_state(self) -> dict:
        room = self.state
        masked = mask_word(room.current_word, room.revealed_indices) if room.phase == "drawing" else ""
        return {
            "roomCode": room.code,
            "ownerId": room.owner_id,
            "drawerId": room.drawer_id,
            "phase": room.phase,
            "isRoundActive": room.phase in ("choosing", "drawing"),
            "isGameOver": room.is_game_over,
            "currentWord": masked,
            "roundTimer": self.countdown.remaining,
            "currentRound": room.current_round,
            "totalRounds": room.total_rounds,
            "players": [p.to_payload() for p in room.players.values()],
            "scoreboard": [p.id for p in room.scoreboard()],
            "messages": [m.to_payload() for m in room.messages],
        }

    @room_operation()
    def join(self, sid: str, name: str, avatar: str = "") -> Player:
        room = self.state
        name = name.strip()

        # One seat per connection; a repeated join keeps the existing seat.
        seated = room.find_by_sid(sid)
        if seated is not None:
            logger.debug("room %s: %s already seated as %s", self.code, sid, seated.name)
            return seated

        player = room.find_by_name(name)
        if player is not None and not player.disconnected:
            raise NameTaken()

        if player is not None:
            player.sid = sid
            player.avatar = avatar
            player.disconnected = False
            room.messages.append(Message.system(f"{player.name} has rejoined the game."))
            logger.info("room %s: %s rejoined (score %d)", self.code, player.name, player.score)
        else:
            player = Player(id=uuid.uuid4().hex, name=name, sid=sid, avatar=avatar)
            room.players[player.id] = player
            room.messages.append(Message.system(f"{player.name} has joined the game."))
            logger.info("room %s: %s joined", self.code, player.name)

        # Any join cancels pending empty-room teardown.
        self._cancel("teardown")

        if len(room.connected_players()) == 1 and room.phase == "idle":
            room.owner_id = player.id
            self._designate_drawer(player)

        self._emit("room:session", {"roomCode": self.code, "playerId": player.id}, to=sid)
        self._emit("draw:sync", {"strokes": room.drawing.to_payload()}, to=sid)
        if player.id == room.drawer_id:
            if room.phase == "choosing":
                self._emit("game:word_choices", {"words": list(room.word_choices)}, to=sid)
            elif room.phase == "drawing":
                self._emit("game:drawer_word", {"word": room.current_word}, to=sid)
        return player

    @room_operation()
    def disconnect(self, sid: str) -> None:
        room = self.state
        player = self._require_player(sid)
        player.disconnected = True
        room.messages.append(Message.system(f"{player.name} has left the game."))
        logger.info("room %s: %s disconnected", self.code, player.name)

        connected = room.connected_players()
        if room.owner_id == player.id and connected:
            room.owner_id = connected[0].id
            room.messages.append(Message.system(f"{connected[0].name} is now the room owner."))

        if player.id == room.drawer_id and room.phase == "drawing":
            # Points already awarded this round stay; nobody else is credited.
            self._end_round(guessed=False)
        elif player.id == room.drawer_id and room.phase == "choosing":
            self._advance_turn(notice=f"{player.name} left before choosing a word.")
        elif room.phase == "drawing":
            if not self._guessers():
                self._end_round(guessed=False)
            elif self._all_guessed():
                self._end_round(guessed=True)

        if not connected:
            self._schedule("teardown", self.settings.empty_room_grace_sec, self._on_teardown_due)

    @room_operation()
    def start_game(self, sid: str, total_rounds: int | None = None) -> None:
        room = self.state
        player = self._require_player(sid)
        if player.id != room.owner_id:
            raise NotAuthorized("only the owner can start the game")
        if room.phase != "idle":
            raise InvalidPhase("a round is already running")
        if len(room.connected_players()) < self.settings.min_players:
            raise InsufficientPlayers()

        if total_rounds is None:
            total_rounds = self.settings.default_total_rounds
        room.total_rounds = max(1, min(int(total_rounds), self.settings.max_total_rounds))
        room.current_round = 0
        room.is_game_over = False
        for p in room.players.values():
            p.score = 0
            p.has_guessed = False

        # Owner draws first.
        owner = room.players[room.owner_id]
        room.players = {owner.id: owner, **{pid: p for pid, p in room.players.items() if pid != owner.id}}
        room.drawer_id = None

        logger.info("room %s: game started by %s (%d rounds)", self.code, owner.name, room.total_rounds)
        self._advance_turn()

    @room_operation()
    def play_again(self, sid: str) -> None:
        room = self.state
        player = self._require_player(sid)
        if player.id != room.owner_id:
            raise NotAuthorized("only the owner can restart")
        if not room.is_game_over:
            raise InvalidPhase("game is not over")

        self._enter_phase("idle")
        room.is_game_over = False
        room.current_round = 0
        room.current_word = ""
        room.revealed_indices = set()
        room.word_choices = []
        room.messages = [Message.system(f"{player.name} reset the game. Waiting for the owner to start.")]
        room.drawing.clear()
        self.countdown.reset()
        for p in room.players.values():
            p.score = 0
            p.has_guessed = False
        self._designate_drawer(player)
        self._emit("draw:cleared", None, to=self.code)

    @room_operation()
    def choose_word(self, sid: str, word: str) -> None:
        room = self.state
        player = self._require_player(sid)
        if player.id != room.drawer_id:
            raise NotAuthorized("only the drawer chooses the word")
        if room.phase != "choosing":
            raise InvalidPhase("not choosing a word")

        w = (word or "").strip()
        if not w or (room.word_choices and w not in room.word_choices):
            raise NotAuthorized("word was not offered")

        self._enter_phase("drawing")
        room.current_word = w
        room.revealed_indices = set()
        room.word_choices = []
        self.countdown.reset()

        self._emit("game:drawer_word", {"word": w}, to=player.sid)
        self._schedule("tick", 1, self._on_tick)

    @room_operation()
    def submit_guess(self, sid: str, text: str) -> bool:
        room = self.state
        player = self._require_player(sid)
        if room.phase != "drawing":
            raise InvalidPhase("no round in progress")
        if player.id == room.drawer_id:
            raise NotAuthorized("the drawer cannot guess")
        if player.has_guessed:
            raise InvalidPhase("already guessed")

        text = (text or "").strip()
        if not text:
            return False

        if is_exact_match(text, room.current_word):
            points = self.settings.scoring.guesser_points(self.countdown.remaining)
            player.has_guessed = True
            player.score += points
            drawer = room.drawer
            if drawer is not None:
                drawer.score += self.settings.scoring.drawer_points()
            room.messages.append(Message.system(f"{player.name} guessed the word!", is_correct=True))
            self._emit("guess:correct", {"playerName": player.name, "points": points}, to=self.code)
            if self._all_guessed():
                self._end_round(guessed=True)
            return True

        room.messages.append(Message(player_name=player.name, text=text))
        self._emit("guess:broadcast", {"playerName": player.name, "text": text}, to=self.code, skip_sid=sid)
        feedback = near_miss_feedback(text, room.current_word)
        if feedback:
            self._emit("guess:near_miss", {"message": feedback}, to=sid)
        return False

    def _require_drawer(self, sid: str) -> Player:
        player = self._require_player(sid)
        if player.id != self.state.drawer_id:
            raise NotAuthorized("only the drawer can draw")
        if self.state.phase != "drawing":
            raise InvalidPhase("not drawing")
        return player

    @room_operation(broadcast=False)
    def start_path(self, sid: str, stroke: Stroke) -> None:
        self._require_drawer(sid)
        if self.state.drawing.append(stroke):
            self._emit("draw:path_started", {"stroke": stroke.to_payload()}, to=self.code, skip_sid=sid)

    @room_operation(broadcast=False)
    def continue_path(self, sid: str, stroke: Stroke) -> None:
        self._require_drawer(sid)
        if self.state.drawing.replace_last(stroke):
            self._emit("draw:path_updated", {"stroke": stroke.to_payload()}, to=self.code, skip_sid=sid)

    @room_operation(broadcast=False)
    def undo(self, sid: str) -> None:
        self._require_drawer(sid)
        if self.state.drawing.pop() is not None:
            self._emit("draw:undone", None, to=self.code, skip_sid=sid)

    @room_operation(broadcast=False)
    def clear_canvas(self, sid: str) -> None:
        self._require_drawer(sid)
        self.state.drawing.clear()
        self._emit("draw:cleared", None, to=self.code, skip_sid=sid)

    @room_operation(broadcast=False)
    def request_scribble_check(self, sid: str) -> None:
        room = self.state
        self._require_player(sid)
        if room.phase != "drawing":
            raise InvalidPhase("no round in progress")
        if self._classifier is None:
            raise ClassifierUnavailable("no classifier configured")
        if self._scribble_pending or not len(room.drawing):
            return

        self._scribble_pending = True
        self._scheduler.spawn(self._run_scribble_check, room.drawing.serialize(), room.current_word, self._epoch)

    def _run_scribble_check(self, drawing_history: str, word: str, epoch: int) -> None:
        verdict: ScribbleVerdict | None = None
        try:
            verdict = self._classifier.analyze(drawing_history, word)
        except ClassifierUnavailable as exc:
            logger.warning("room %s: scribble check failed: %s", self.code, exc)
        except Exception:
            logger.exception("room %s: scribble check crashed", self.code)

        with self._lock:
            if self._closed or epoch != self._epoch or self.state.phase != "drawing":
                return
            self._scribble_pending = False
            if verdict is not None and verdict.should_skip:
                self._emit("game:skip_suggestion", {"reason": verdict.reason}, to=self.code)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            for handle in self._timers.values():
                handle.cancel()
            self._timers.clear()

    def _on_teardown_due(self) -> None:
        if self.state.connected_players():
            return
        if self._on_empty is not None:
            self._on_empty(self)

    def _designate_drawer(self, drawer: Player) -> None:
        self.state.drawer_id = drawer.id
        for p in self.state.players.values():
            p.is_drawing = p.id == drawer.id

    def _guessers(self) -> list[Player]:
        room = self.state
        return [p for p in room.connected_players() if p.id != room.drawer_id]

    def _all_guessed(self) -> bool:
        guessers = self._guessers()
        return bool(guessers) and all(p.has_guessed for p in guessers)

    def _next_drawer(self) -> tuple[Player, int] | None:
        """Next connected player after the current drawer and the round it lands in."""
        room = self.state
        ids = list(room.players)
        if room.current_round == 0:
            owner = room.players.get(room.owner_id)
            if owner is not None and not owner.disconnected:
                return owner, 1
            connected = room.connected_players()
            return (connected[0], 1) if connected else None

        start = ids.index(room.drawer_id) if room.drawer_id in room.players else -1
        for step in range(1, len(ids) + 1):
            idx = start + step
            candidate = room.players[ids[idx % len(ids)]]
            if not candidate.disconnected:
                wrapped = idx >= len(ids)
                return candidate, room.current_round + (1 if wrapped else 0)
        return None

    def _advance_turn(self, notice: str | None = None) -> None:
        room = self.state
        self._enter_phase("idle")
        if notice:
            room.messages.append(Message.system(notice))

        if len(room.connected_players()) < self.settings.min_players:
            room.messages.append(Message.system("Not enough players to continue. Waiting for more players."))
            err = InsufficientPlayers()
            self._emit("room:error", {"error": err.code, "message": str(err)}, to=self.code)
            logger.info("room %s: round aborted, not enough players", self.code)
            return

        nxt = self._next_drawer()
        if nxt is None:
            return
        drawer, round_no = nxt
        if round_no > room.total_rounds:
            self._finish_game()
            return

        room.current_round = round_no
        self._begin_choosing(drawer, notice)

    def _begin_choosing(self, drawer: Player, notice: str | None = None) -> None:
        room = self.state
        self._enter_phase("choosing")
        self._designate_drawer(drawer)
        for p in room.players.values():
            p.has_guessed = False
        room.current_word = ""
        room.revealed_indices = set()
        room.drawing.clear()
        room.messages = [Message.system(notice)] if notice else []
        room.messages.append(Message.system(f"{drawer.name} is now drawing!"))
        room.word_choices = self._word_bank.pick_choices(self.settings.word_choices_count)
        self.countdown.reset()

        self._emit("draw:cleared", None, to=self.code)
        self._emit("game:word_choices", {"words": list(room.word_choices)}, to=drawer.sid)
        self._schedule("choose", self.settings.choose_duration_sec, self._on_choose_timeout, drawer.id)

    def _on_choose_timeout(self, drawer_id: str) -> None:
        room = self.state
        if room.phase != "choosing" or room.drawer_id != drawer_id:
            return
        drawer = room.players[drawer_id]
        self._advance_turn(notice=f"{drawer.name} didn't choose a word in time. Skipping turn.")
        self._broadcast_state()

    def _on_tick(self) -> None:
        if self.state.phase != "drawing":
            return
        tick = self.countdown.tick()
        if tick.expired:
            self._end_round(guessed=False)
            self._broadcast_state()
            return

        self._emit("game:tick", {"secondsRemaining": tick.remaining}, to=self.code)
        if tick.reached_half and self._reveal_hint():
            self._schedule("hint", self.settings.hint_interval_sec, self._on_hint)
        self._schedule("tick", 1, self._on_tick)

    def _reveal_hint(self) -> bool:
        """Reveal one letter; True while further hints remain possible."""
        room = self.state
        idx = pick_hint_index(room.current_word, room.revealed_indices, self._rng)
        if idx is None:
            return False
        room.revealed_indices.add(idx)
        self._broadcast_state()
        return can_reveal(room.current_word, room.revealed_indices)

    def _on_hint(self) -> None:
        if self.state.phase != "drawing":
            return
        if self._reveal_hint():
            self._schedule("hint", self.settings.hint_interval_sec, self._on_hint)

    def _end_round(self, guessed: bool) -> None:
        room = self.state
        self._enter_phase("ending")
        word = room.current_word
        text = "All players guessed the word!" if guessed else "Time's up!"
        room.messages.append(Message.system(f"{text} The word was: {word}"))
        self._emit("game:round_ended", {"word": word, "reason": "guessed" if guessed else "timeout"}, to=self.code)
        self._schedule("cooldown", self.settings.reveal_duration_sec, self._on_cooldown_done)

    def _on_cooldown_done(self) -> None:
        if self.state.phase != "ending":
            return
        self._advance_turn()
        self._broadcast_state()

    def _finish_game(self) -> None:
        room = self.state
        room.is_game_over = True
        room.current_word = ""
        room.revealed_indices = set()
        for p in room.players.values():
            p.is_drawing = False

        board = room.scoreboard()
        if board:
            top = board[0].score
            winners = ", ".join(p.name for p in board if p.score == top)
            room.messages.append(Message.system(f"Game over! Winner: {winners} with {top} points."))
        logger.info("room %s: game over", self.code)

    def _require_player(self, sid: str) -> Player:
        player = self.state.find_by_sid(sid)
        if player is None:
            raise NotAuthorized("not a player in this room")
        return player

    def _enter_phase(self, phase: Phase) -> None:
        self._epoch += 1
        for name in ROUND_TIMERS:
            self._cancel(name)
        self._scribble_pending = False
        if self.state.phase != phase:
            logger.debug("room %s: %s -> %s", self.code, self.state.phase, phase)
        self.state.phase = phase

    def _schedule(self, name: str, delay: float, callback: Callable[..., None], *args: Any) -> None:
        self._cancel(name)
        epoch = self._epoch
        handle: TimerHandle

        def fire() -> None:
            with self._lock:
                if self._closed or self._timers.get(name) is not handle:
                    return
                if name in ROUND_TIMERS and epoch != self._epoch:
                    return
                del self._timers[name]
                try:
                    callback(*args)
                except Exception:
                    logger.exception("room %s: %s timer failed", self.code, name)

        handle = self._scheduler.call_later(delay, fire)
        self._timers[name] = handle

    def _cancel(self, name: str) -> None:
        handle = self._timers.pop(name, None)
        if handle is not None:
            handle.cancel()

    def _emit(self, event: str, payload: Any, *, to: str, skip_sid: str | None = None) -> None:
        try:
            self._notifier.emit(event, payload, to=to, skip_sid=skip_sid)
        except Exception:
            logger.exception("room %s: emit %s failed", self.code, event)

    def _broadcast_state(self) -> None:
        self._emit("room:state", self._public_state(), to=self.code)
