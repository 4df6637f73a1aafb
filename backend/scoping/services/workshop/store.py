import threading
from typing import Dict, List, Optional

from scoping.models import SESSION_DURATION_SEC, Room


class RoomStore:
    """Process-wide registry of rooms, one ``Room`` per code.

    All access goes through ``get_or_create``/``get``/``reset`` so concurrent
    first joins for the same code always land on a single instance.
    """

    def __init__(self, session_budget: int = SESSION_DURATION_SEC):
        self.session_budget = session_budget
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def get_or_create(self, code: str) -> Room:
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                room = Room(code, session_budget=self.session_budget)
                self._rooms[code] = room
            return room

    def get(self, code: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(code)

    def reset(self, code: str) -> Optional[Room]:
        # Same instance, same connections; only state and slots start over
        with self._lock:
            room = self._rooms.get(code)
        if room is None:
            return None
        with room.lock:
            room.reinitialize()
        return room

    def codes(self) -> List[str]:
        with self._lock:
            return sorted(self._rooms)

    def rooms(self) -> List[Room]:
        with self._lock:
            return [self._rooms[code] for code in sorted(self._rooms)]
