import logging

GAME_STATE_EVENT = 'gameState'


class Broadcaster:
    """Push full room snapshots to every connection bound to the room.

    Delivery is fire-and-forget and per connection: a failed send is logged
    and skipped, the rest of the room still gets the snapshot.
    """

    def __init__(self, socketio, namespace: str = '/', logger=None):
        self.socketio = socketio
        self.namespace = namespace
        self.logger = logger or logging.getLogger(__name__)

    def broadcast(self, room):
        payload = room.snapshot()
        for sid in sorted(room.connections):
            try:
                self.socketio.emit(GAME_STATE_EVENT, payload, to=sid, namespace=self.namespace)
            except Exception as exc:
                self.logger.warning(f"[broadcast-fail] room={room.code} sid={sid} error={exc}")
        return payload
