"""Workshop domain services: room store, phase machine, countdown and routing.

Everything in here is transport-agnostic. Socket.IO handlers and HTTP routes
parse wire payloads into events and hand them to the ``EventRouter``; the
router owns the per-room locking, timer lifecycle and broadcasts.
"""

from .errors import WorkshopError, InvalidPayload, UnknownEvent
from .events import parse_event
from .phases import Rules, Transition, apply
from .store import RoomStore
from .broadcast import Broadcaster
from .timer import Countdown
from .router import EventRouter

__all__ = [
    'WorkshopError',
    'InvalidPayload',
    'UnknownEvent',
    'parse_event',
    'Rules',
    'Transition',
    'apply',
    'RoomStore',
    'Broadcaster',
    'Countdown',
    'EventRouter',
]
