import threading


class Countdown:
    """Owned handle for one room's once-per-second countdown.

    The loop runs as a Socket.IO background task and hands every tick to
    ``on_tick(countdown)``. The receiver checks ``cancelled`` under the room
    lock before mutating anything, so a countdown that was cancelled while
    sleeping never touches the room again.
    """

    def __init__(self, socketio, room_code: str, on_tick, interval: float = 1.0, logger=None):
        self.socketio = socketio
        self.room_code = room_code
        self.on_tick = on_tick
        self.interval = interval
        self.logger = logger
        self.ticks = 0
        self._cancelled = threading.Event()
        self._started = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        if self._started or self.cancelled:
            return
        self._started = True
        if self.logger:
            self.logger.info(f"[timer-set] room={self.room_code} interval={self.interval}s")
        self.socketio.start_background_task(self._run)

    def cancel(self) -> None:
        # Expiry, restart and shutdown may all race to get here
        if self.cancelled:
            return
        self._cancelled.set()
        if self.logger:
            self.logger.info(f"[timer-cancel] room={self.room_code} ticks={self.ticks}")

    def _run(self) -> None:
        while not self.cancelled:
            self.socketio.sleep(self.interval)
            if self.cancelled:
                break
            self.ticks += 1
            self.on_tick(self)
