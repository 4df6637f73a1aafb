import logging
import threading
from contextlib import nullcontext
from typing import Dict, Optional

from scoping.models import Room
from .events import JoinRoom, SubmitReflection, Tick
from .phases import Rules, Transition, apply
from .store import RoomStore
from .timer import Countdown

_GONE = object()


class EventRouter:
    """Apply workshop events to rooms, one event at a time per room.

    - Resolves the target room: an explicit room code wins, otherwise the
      room the connection was bound to at join time
    - Runs the pure phase transition under the room lock
    - Starts/cancels the room's countdown as the transition asks
    - Broadcasts the full snapshot while still holding the lock, so every
      connection sees the room's states in order
    Events for unknown rooms are dropped without a broadcast.
    """

    def __init__(
        self,
        store: RoomStore,
        broadcaster,
        socketio=None,
        rules: Rules = Rules(),
        tick_interval: float = 1.0,
        heartbeat_sec: int = 0,
        autostart_timers: bool = True,
        logger=None,
    ):
        self.store = store
        self.broadcaster = broadcaster
        self.socketio = socketio
        self.rules = rules
        self.tick_interval = tick_interval
        self.heartbeat_sec = heartbeat_sec
        self.autostart_timers = autostart_timers
        self.logger = logger or logging.getLogger(__name__)
        self._connections: Dict[str, str] = {}
        self._connections_lock = threading.Lock()

    # ---- connection context ----

    def room_code_for(self, sid: Optional[str]) -> Optional[str]:
        if sid is None:
            return None
        with self._connections_lock:
            return self._connections.get(sid)

    # Lock order is always room.lock -> _connections_lock, and at most one
    # room lock is held at a time.

    def connect(self, sid: str) -> None:
        """Register a live connection. Only live connections can be bound."""
        with self._connections_lock:
            self._connections.setdefault(sid, None)

    def _detach(self, sid: str, keep: Optional[str] = None, forget: bool = False) -> Optional[str]:
        """Take ``sid`` out of its current room, unless that room is ``keep``.

        Returns the room code it was bound to. With ``forget`` the connection
        is dropped from the registry as well.
        """
        while True:
            with self._connections_lock:
                if sid not in self._connections:
                    return None
                code = self._connections[sid]
            room = self.store.get(code) if code and code != keep else None
            with (room.lock if room is not None else nullcontext()):
                with self._connections_lock:
                    if self._connections.get(sid, _GONE) != code:
                        # Moved or closed while we waited for the lock
                        continue
                    if room is not None:
                        room.connections.discard(sid)
                    if forget:
                        del self._connections[sid]
                    elif code != keep:
                        self._connections[sid] = None
                    return code

    def _attach(self, sid: str, room: Room) -> Optional[bool]:
        # Caller holds room.lock. None means the sid got bound elsewhere meanwhile.
        with self._connections_lock:
            if sid not in self._connections:
                return False
            current = self._connections[sid]
            if current is not None and current != room.code:
                return None
            self._connections[sid] = room.code
            room.connections.add(sid)
            return True

    def disconnect(self, sid: str) -> Optional[str]:
        """Forget a connection. Its participant slot is left as is."""
        code = self._detach(sid, forget=True)
        if code is not None:
            self.logger.info(f"[leave] room={code} sid={sid}")
        return code

    # ---- event application ----

    def dispatch(self, event, sid: Optional[str] = None) -> Optional[Room]:
        """Apply one inbound event. Returns the room it landed on, if any."""
        if isinstance(event, SubmitReflection):
            code = event.room_code or self.room_code_for(sid)
            self.logger.info(f"[reflection] room={code} role={event.role}: {event.reflection}")
            return None

        if isinstance(event, JoinRoom):
            room = self.store.get_or_create(event.room_code)
            while True:
                if sid is not None:
                    # Leave the old room under its own lock before taking this one
                    self._detach(sid, keep=room.code)
                with room.lock:
                    if sid is not None:
                        bound = self._attach(sid, room)
                        if bound is None:
                            continue
                        if not bound:
                            self.logger.info(f"[ignored] room={room.code} sid={sid} connection closed")
                    self.logger.info(f"[join] room={room.code} role={event.role} name={event.name} sid={sid}")
                    self._apply(room, event)
                return room

        code = event.room_code or self.room_code_for(sid)
        room = self.store.get(code) if code else None
        if room is None:
            self.logger.debug(f"[ignored] event={type(event).__name__} room={code} sid={sid} unknown room")
            return None
        with room.lock:
            self._apply(room, event)
        return room

    def _apply(self, room: Room, event) -> Transition:
        transition = apply(room.state, room.participants, event, self.rules)
        if transition.stop_timer:
            self._stop_timer(room)
        if transition.reset:
            self.store.reset(room.code)
            self.logger.info(f"[restart] room={room.code}")
        else:
            room.state = transition.state
            room.participants = transition.players
        if transition.phase_changed:
            self.logger.info(
                f"[phase] room={room.code} {transition.previous_phase} -> {room.state.phase} via {type(event).__name__}"
            )
        if transition.start_timer:
            self._start_timer(room)
        if transition.broadcast:
            self.broadcaster.broadcast(room)
        return transition

    # ---- countdown ----

    def _start_timer(self, room: Room) -> None:
        if room.timer is not None and not room.timer.cancelled:
            return
        countdown = Countdown(
            self.socketio,
            room.code,
            self._on_countdown_tick,
            interval=self.tick_interval,
            logger=self.logger,
        )
        room.timer = countdown
        if self.autostart_timers and self.socketio is not None:
            countdown.start()

    def _stop_timer(self, room: Room) -> None:
        if room.timer is None:
            return
        room.timer.cancel()
        room.timer = None

    def tick(self, code: str) -> Optional[Room]:
        """Advance a room's countdown by one step. No-op without a countdown."""
        room = self.store.get(code)
        if room is None:
            return None
        with room.lock:
            if room.timer is not None:
                self._tick(room)
        return room

    def _on_countdown_tick(self, countdown: Countdown) -> None:
        room = self.store.get(countdown.room_code)
        if room is None:
            countdown.cancel()
            return
        with room.lock:
            if countdown.cancelled or room.timer is not countdown:
                return
            self._tick(room)

    def _tick(self, room: Room) -> None:
        self._apply(room, Tick(room.code))
        remaining = room.state.time_remaining
        if remaining == 0:
            self.logger.info(f"[timer-expire] room={room.code} phase={room.state.phase}")
        elif self.heartbeat_sec and remaining % self.heartbeat_sec == 0:
            self.logger.info(f"[timer-heartbeat] room={room.code} phase={room.state.phase} remaining={remaining}s")

    def snapshot(self, code: str):
        room = self.store.get(code)
        if room is None:
            return None
        with room.lock:
            return room.snapshot()

    def shutdown(self) -> None:
        for room in self.store.rooms():
            with room.lock:
                self._stop_timer(room)
