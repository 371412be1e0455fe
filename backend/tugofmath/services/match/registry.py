import threading
from typing import Dict, Optional, Set, Tuple

from tugofmath.errors import RoomFull, RoomNotFound
from tugofmath.models import BALL_MAX, BALL_MIN, Room, generate_room_code, normalize_code


class RoomRegistry:
    """Live rooms keyed by code.

    `_lock` guards the code map. When a room lock is also needed it is
    taken after `_lock`, never before.
    """

    def __init__(self, ball_start: int = 50, rng=None):
        # A start on a goal line would end the game before the first round
        if not BALL_MIN < ball_start < BALL_MAX:
            raise ValueError(f"ball_start must be between {BALL_MIN} and {BALL_MAX} exclusive, got {ball_start}")
        self.ball_start = ball_start
        self._rng = rng
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code) -> bool:
        return normalize_code(code) in self._rooms

    def codes(self):
        with self._lock:
            return sorted(self._rooms)

    def get(self, code) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(normalize_code(code))

    def create_room(self, owner_id: str) -> str:
        with self._lock:
            code = generate_room_code(lambda c: c in self._rooms, rng=self._rng)
            self._rooms[code] = Room(code, owner_id, ball=self.ball_start)
            return code

    def join_room(self, code, joiner_id: str) -> int:
        """Add `joiner_id` as the second player and re-arm the start barrier.

        Raises RoomNotFound or RoomFull without touching the room. A
        connection that is already a member gets its index back unchanged.
        """
        return self.admit(code, joiner_id)[0]

    def admit(self, code, joiner_id: str) -> Tuple[int, bool]:
        """Same as `join_room`, also returning whether `joiner_id` was added."""
        code = normalize_code(code)
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                raise RoomNotFound(code)
            with room.lock:
                if room.has_player(joiner_id):
                    return room.player_index(joiner_id), False
                if room.is_full:
                    raise RoomFull(code)
                room.players.append(joiner_id)
                room.arm_barrier()
                room.game_over = False
                return room.player_index(joiner_id), True

    def remove_rooms_containing(self, conn_id: str) -> Set[str]:
        """Delete every room `conn_id` belongs to and return their codes."""
        removed = []
        with self._lock:
            for code, room in list(self._rooms.items()):
                if room.has_player(conn_id):
                    removed.append(self._rooms.pop(code))
        for room in removed:
            with room.lock:
                room.closed = True
                room.current_question = None
        return {room.code for room in removed}
