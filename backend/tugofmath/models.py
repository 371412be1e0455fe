import random
import threading
import time
from typing import List, Optional, Set

# No I/O/0/1 so codes can be read aloud and typed without confusion
ROOM_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
ROOM_CODE_LENGTH = 5
MAX_PLAYERS = 2
BALL_MIN = 0
BALL_MAX = 100

PHASE_LOBBY = 'lobby'
PHASE_BARRIER = 'barrier'
PHASE_ROUND_ACTIVE = 'round_active'
PHASE_ROUND_LOCKED = 'round_locked'
PHASE_GAME_OVER = 'game_over'


def generate_room_code(is_taken, length=ROOM_CODE_LENGTH, rng=None):
    """Generate a short room code that `is_taken` does not reject."""
    rng = rng or random
    while True:
        code = ''.join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(length))
        if not is_taken(code):
            return code


def normalize_code(code) -> str:
    if not isinstance(code, str):
        return ''
    return code.strip().upper()


class Question:
    def __init__(self, text: str, answer: int, options: List[int]):
        self.text = text
        self.answer = answer
        self.options = options

    def is_correct(self, value) -> bool:
        return value == self.answer

    def to_dict(self):
        # The answer never leaves the server
        return {
            'question': self.text,
            'options': list(self.options),
        }

    def __repr__(self):
        return f"<Question {self.text!r} answer={self.answer} options={self.options}>"


class Room:
    """One two-player match session.

    Mutated only while holding `lock`; the registry owns the instance and
    callers refer to it by `code`.
    """

    def __init__(self, code: str, owner_id: str, ball: int = 50):
        self.code = code
        self.players: List[str] = [owner_id]
        self.ball = ball
        self.current_question: Optional[Question] = None
        self.round_locked = False
        self.waiting_for_barrier = True
        self.ready_set: Set[str] = set()
        self.game_over = False
        self.round_started_at = 0.0
        self.round_number = 0
        self.games_played = 0
        self.attempted: Set[str] = set()
        self.closed = False
        self.created_at = time.time()
        self.lock = threading.RLock()

    def has_player(self, conn_id) -> bool:
        return conn_id in self.players

    def player_index(self, conn_id) -> int:
        return self.players.index(conn_id)

    @property
    def is_full(self) -> bool:
        return len(self.players) >= MAX_PLAYERS

    @property
    def phase(self) -> str:
        if len(self.players) < MAX_PLAYERS:
            return PHASE_LOBBY
        if self.game_over:
            return PHASE_GAME_OVER
        if self.waiting_for_barrier or not self.current_question:
            return PHASE_BARRIER
        if self.round_locked:
            return PHASE_ROUND_LOCKED
        return PHASE_ROUND_ACTIVE

    def arm_barrier(self) -> None:
        self.waiting_for_barrier = True
        self.ready_set = set()
        self.current_question = None

    def to_dict(self):
        return {
            'code': self.code,
            'phase': self.phase,
            'players': len(self.players),
            'ball': self.ball,
            'ready_count': len(self.ready_set),
            'round': self.round_number,
            'round_locked': self.round_locked,
            'waiting_for_barrier': self.waiting_for_barrier,
            'game_over': self.game_over,
            'games_played': self.games_played,
            'question': self.current_question.to_dict() if self.current_question else None,
        }

    def __repr__(self):
        return f"<Room {self.code} phase={self.phase} ball={self.ball} players={len(self.players)}>"
