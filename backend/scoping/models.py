import copy
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Union

from config import DEFAULT_SESSION_DURATION_SEC

FeatureId = Union[int, str]

DESIGNER = 'designer'
CODER = 'coder'
PM = 'pm'
ROLES = (DESIGNER, CODER, PM)

WAITING = 'waiting'
DESIGN = 'design'
REVIEW = 'review'
DECISION = 'decision'
SUMMARY = 'summary'
PHASES = (WAITING, DESIGN, REVIEW, DECISION, SUMMARY)

SESSION_DURATION_SEC = DEFAULT_SESSION_DURATION_SEC


@dataclass
class FinalScope:
    kept: List[FeatureId] = field(default_factory=list)
    cut: List[FeatureId] = field(default_factory=list)

    def to_dict(self):
        return {'kept': list(self.kept), 'cut': list(self.cut)}


@dataclass
class GameState:
    phase: str = WAITING
    wishlist: List[FeatureId] = field(default_factory=list)
    coder_feedback: Dict[FeatureId, Dict[str, Any]] = field(default_factory=dict)
    pm_decisions: Dict[FeatureId, Dict[str, Any]] = field(default_factory=dict)
    final_scope: FinalScope = field(default_factory=FinalScope)
    time_remaining: int = SESSION_DURATION_SEC

    @classmethod
    def initial(cls, session_budget: int = SESSION_DURATION_SEC) -> 'GameState':
        return cls(time_remaining=session_budget)

    def copy(self) -> 'GameState':
        return copy.deepcopy(self)

    def to_dict(self):
        # Map keys go out as strings, the way JSON objects carry them
        return {
            'phase': self.phase,
            'wishlist': list(self.wishlist),
            'coderFeedback': {str(k): dict(v) for k, v in self.coder_feedback.items()},
            'pmDecisions': {str(k): dict(v) for k, v in self.pm_decisions.items()},
            'finalScope': self.final_scope.to_dict(),
            'timeRemaining': self.time_remaining,
        }


class Room:
    """One workshop session, keyed by the code its creator picked.

    ``lock`` is the room's single serialization point: client events and
    countdown ticks both mutate ``state`` only while holding it.
    """

    def __init__(self, code: str, session_budget: int = SESSION_DURATION_SEC):
        self.code = code
        self.session_budget = session_budget
        self.participants: Dict[str, str] = {}
        self.connections: Set[str] = set()
        self.state = GameState.initial(session_budget)
        self.timer = None
        self.lock = threading.RLock()

    @property
    def phase(self) -> str:
        return self.state.phase

    def reinitialize(self) -> None:
        self.state = GameState.initial(self.session_budget)
        self.participants = {}

    def snapshot(self):
        payload = self.state.to_dict()
        payload['players'] = dict(self.participants)
        return payload

    def to_dict(self, include_connections: bool = False):
        data = {
            'code': self.code,
            'phase': self.state.phase,
            'players': dict(self.participants),
            'timer_running': self.timer is not None,
        }
        if include_connections:
            data['connections'] = len(self.connections)
        return data

    def __repr__(self):
        return f"<Room {self.code} phase={self.state.phase}>"


def all_roles_filled(participants: Optional[Dict[str, str]]) -> bool:
    participants = participants or {}
    return all(participants.get(role) for role in ROLES)
