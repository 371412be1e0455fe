import logging
import time
from typing import Optional, Set

from tugofmath.errors import RoomError
from tugofmath.models import BALL_MAX, BALL_MIN, MAX_PLAYERS, Room, normalize_code
from .questions import generate_question

ADVANCE_AUTO = 'auto'
ADVANCE_BARRIER = 'barrier'
ANSWERS_UNLIMITED = 'unlimited'
ANSWERS_SINGLE = 'single'

WAITING_MESSAGES = {
    'start': 'Both players must press ready to start.',
    'goal': 'Goal! Both players must press ready for a new game.',
    'next_round': 'Both players must press ready for the next question.',
}


def _coerce_answer(value) -> Optional[int]:
    # Clients send numbers or numeric strings; anything else is a wrong answer
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class MatchStateMachine:
    """Applies player intents to rooms and broadcasts the outcome.

    Every mutation of a room happens while holding `room.lock`, so the
    check-and-set of `round_locked` in `submit_answer` admits exactly one
    winner per round no matter how handlers are scheduled. Invalid or
    stale intents are logged and ignored; only join errors are reported
    to the caller.
    """

    def __init__(self, registry, broadcaster, scheduler, config=None, logger=None, question_factory=None):
        config = config or {}
        self.registry = registry
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.logger = logger or logging.getLogger(__name__)
        self.question_factory = question_factory or generate_question
        self.ball_step = int(config.get('BALL_STEP', 10))
        if self.ball_step <= 0:
            raise ValueError(f"BALL_STEP must be positive, got {self.ball_step}")
        self.advance_delay_sec = int(config.get('ROUND_ADVANCE_DELAY_MS', 600)) / 1000.0
        self.advance_policy = config.get('ROUND_ADVANCE_POLICY', ADVANCE_AUTO)
        self.answer_policy = config.get('ANSWER_POLICY', ANSWERS_UNLIMITED)
        if self.advance_policy not in (ADVANCE_AUTO, ADVANCE_BARRIER):
            raise ValueError(f"Unknown ROUND_ADVANCE_POLICY: {self.advance_policy!r}")
        if self.answer_policy not in (ANSWERS_UNLIMITED, ANSWERS_SINGLE):
            raise ValueError(f"Unknown ANSWER_POLICY: {self.answer_policy!r}")

    def _ignore(self, what: str, code, conn_id) -> None:
        self.logger.debug(f"[ignored] {what} room={code} conn={conn_id}")

    def _live_room(self, code) -> Optional[Room]:
        room = self.registry.get(code)
        if room is None or room.closed:
            return None
        return room

    # ---- Lobby ----

    def create_room(self, conn_id: str) -> str:
        code = self.registry.create_room(conn_id)
        self.broadcaster.add_member(conn_id, code)
        self.logger.info(f"[room-create] room={code} owner={conn_id}")
        self.broadcaster.to_connection(conn_id, 'room_created', {'code': code, 'player_index': 0})
        return code

    def join_room(self, code, conn_id: str) -> Optional[int]:
        """Join `code` as the second player; returns the player index or None."""
        code = normalize_code(code)
        try:
            index, added = self.registry.admit(code, conn_id)
        except RoomError as exc:
            self.logger.info(f"[room-join-failed] room={code} conn={conn_id} error={exc.error}")
            self.broadcaster.to_connection(conn_id, 'room_error', exc.to_dict())
            return None

        room = self._live_room(code)
        if room is None:
            return None
        with room.lock:
            if room.closed:
                return None
            self.broadcaster.to_connection(conn_id, 'room_joined', {'code': code, 'player_index': index})
            if not added:
                return index
            self.broadcaster.add_member(conn_id, code)
            self.logger.info(f"[room-join] room={code} conn={conn_id} index={index}")
            self.broadcaster.to_room(code, 'both_present', {'message': 'Both players are here.'})
            self._announce_barrier(room, 'start')
            self.broadcaster.to_room(code, 'ball', {'ball': room.ball})
            return index

    # ---- Rounds ----

    def start_round(self, room: Room) -> bool:
        with room.lock:
            if room.closed or len(room.players) < MAX_PLAYERS:
                return False
            if room.waiting_for_barrier or room.game_over:
                return False
            room.round_locked = False
            room.attempted = set()
            room.current_question = self.question_factory()
            room.round_started_at = time.monotonic()
            room.round_number += 1
            self.logger.info(
                f"[round-start] room={room.code} round={room.round_number} question={room.current_question.text!r}"
            )
            payload = room.current_question.to_dict()
            payload['ball'] = room.ball
            payload['round'] = room.round_number
            self.broadcaster.to_room(room.code, 'round', payload)
            return True

    def submit_ready(self, code, conn_id: str) -> None:
        room = self._live_room(code)
        if room is None:
            self._ignore('ready', code, conn_id)
            return
        with room.lock:
            if room.closed or not room.has_player(conn_id):
                self._ignore('ready', code, conn_id)
                return
            if not room.waiting_for_barrier or not room.is_full:
                self._ignore('ready', code, conn_id)
                return
            room.ready_set.add(conn_id)
            self.broadcaster.to_room(room.code, 'ready_count', {'count': len(room.ready_set)})
            if len(room.ready_set) < MAX_PLAYERS:
                return

            if room.game_over:
                room.ball = self.registry.ball_start
                room.game_over = False
                self.broadcaster.to_room(room.code, 'ball', {'ball': room.ball})
            room.waiting_for_barrier = False
            room.ready_set = set()
            self.start_round(room)

    def submit_answer(self, code, conn_id: str, selected) -> None:
        room = self._live_room(code)
        if room is None:
            self._ignore('answer', code, conn_id)
            return
        with room.lock:
            question = room.current_question
            if room.closed or question is None or not room.has_player(conn_id):
                self._ignore('answer', code, conn_id)
                return
            if room.waiting_for_barrier or room.game_over:
                self._ignore('answer', code, conn_id)
                return

            correct = question.is_correct(_coerce_answer(selected))
            if room.round_locked:
                # Too late to score; the player still learns whether they were right
                self.broadcaster.to_connection(conn_id, 'answer_result', {'correct': correct, 'counted': False})
                return
            if self.answer_policy == ANSWERS_SINGLE and conn_id in room.attempted:
                self.broadcaster.to_connection(conn_id, 'answer_result', {'correct': correct, 'counted': False})
                return
            room.attempted.add(conn_id)
            self.broadcaster.to_connection(conn_id, 'answer_result', {'correct': correct, 'counted': True})

            if not correct:
                if self.answer_policy == ANSWERS_SINGLE and room.attempted.issuperset(room.players):
                    self._miss_round(room)
                return

            room.round_locked = True
            winner = room.player_index(conn_id)
            self._push_ball(room, winner)
            elapsed_ms = int((time.monotonic() - room.round_started_at) * 1000)
            self.logger.info(
                f"[round-win] room={room.code} round={room.round_number} winner={winner} ball={room.ball} elapsed_ms={elapsed_ms}"
            )
            self.broadcaster.to_room(room.code, 'ball', {'ball': room.ball})
            self.broadcaster.to_room(room.code, 'round_winner', {
                'winner_player_index': winner,
                'ball': room.ball,
                'elapsed_ms': elapsed_ms,
            })

            if room.ball in (BALL_MIN, BALL_MAX):
                self._end_game(room, winner)
                return
            self._finish_round(room)

    def _push_ball(self, room: Room, winner: int) -> None:
        if winner == 0:
            room.ball = min(BALL_MAX, room.ball + self.ball_step)
        else:
            room.ball = max(BALL_MIN, room.ball - self.ball_step)

    def _miss_round(self, room: Room) -> None:
        # Single-attempt policy: nobody can win this round any more
        room.round_locked = True
        self.logger.info(f"[round-miss] room={room.code} round={room.round_number}")
        self.broadcaster.to_room(room.code, 'round_missed', {'ball': room.ball})
        self._finish_round(room)

    def _finish_round(self, room: Room) -> None:
        if self.advance_policy == ADVANCE_BARRIER:
            room.arm_barrier()
            self._announce_barrier(room, 'next_round')
            return
        self.scheduler.call_later(self.advance_delay_sec, self._advance_round, room.code, room, room.round_number)

    def _advance_round(self, code: str, room: Room, expected_round: int) -> None:
        # The room may have been deleted, replaced or moved on since scheduling
        if self.registry.get(code) is not room:
            self.logger.info(f"[timer-abort] room={code} round={expected_round} room gone")
            return
        with room.lock:
            self.logger.debug(f"[timer-fire] room={code} expected_round={expected_round} actual_round={room.round_number}")
            if room.closed or room.round_number != expected_round or not room.round_locked:
                self.logger.info(f"[timer-abort] room={code} round={expected_round} mismatch")
                return
            if room.waiting_for_barrier or room.game_over:
                self.logger.info(f"[timer-abort] room={code} round={expected_round} waiting")
                return
            room.round_locked = False
            self.start_round(room)

    def _end_game(self, room: Room, winner: int) -> None:
        room.game_over = True
        room.arm_barrier()
        room.games_played += 1
        self.logger.info(f"[goal] room={room.code} winner={winner} ball={room.ball} games={room.games_played}")
        self.broadcaster.to_room(room.code, 'gameover', {'winner_player_index': winner, 'ball': room.ball})
        self._announce_barrier(room, 'goal')

    def _announce_barrier(self, room: Room, reason: str) -> None:
        self.broadcaster.to_room(room.code, 'waiting_barrier', {
            'reason': reason,
            'message': WAITING_MESSAGES[reason],
        })

    # ---- Teardown ----

    def disconnect(self, conn_id: str) -> Set[str]:
        """Delete every room `conn_id` was in and tell the other player."""
        codes = self.registry.remove_rooms_containing(conn_id)
        for code in sorted(codes):
            self.logger.info(f"[room-delete] room={code} left={conn_id}")
            self.broadcaster.to_room(code, 'opponent_left', {
                'code': code,
                'message': 'Your opponent left the game.',
            })
            self.broadcaster.close(code)
        return codes

    def room_state(self, code) -> Optional[dict]:
        room = self._live_room(code)
        if room is None:
            return None
        with room.lock:
            return room.to_dict()
