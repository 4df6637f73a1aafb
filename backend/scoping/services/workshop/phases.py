"""Pure phase transitions for a workshop room.

``apply`` never touches locks, timers or sockets. It takes the current state
and participants plus one event and returns a ``Transition`` describing the
new values and the side effects the router has to carry out.

Phase advancement is derived from the state contents each time a relevant
event lands, so replaying an event that already completed a phase is a no-op
transition.
"""

from dataclasses import dataclass, field
from typing import Dict

from scoping.models import (
    DECISION,
    DESIGN,
    REVIEW,
    SESSION_DURATION_SEC,
    SUMMARY,
    WAITING,
    FinalScope,
    GameState,
    all_roles_filled,
)
from .events import (
    JoinRoom,
    RestartWorkshop,
    SubmitCoderFeedback,
    SubmitFinalVotes,
    SubmitPMDecisions,
    SubmitReflection,
    SubmitWishlist,
    Tick,
)

@dataclass(frozen=True)
class Rules:
    session_budget: int = SESSION_DURATION_SEC
    # Off: review completes once both maps are non-empty.
    # On: both maps must also cover every wishlist id.
    require_full_coverage: bool = False


@dataclass
class Transition:
    state: GameState
    players: Dict[str, str] = field(default_factory=dict)
    previous_phase: str = WAITING
    start_timer: bool = False
    stop_timer: bool = False
    reset: bool = False
    broadcast: bool = True

    @property
    def phase_changed(self) -> bool:
        return self.state.phase != self.previous_phase


def review_complete(state: GameState, rules: Rules) -> bool:
    if not state.coder_feedback or not state.pm_decisions:
        return False
    if not rules.require_full_coverage:
        return True
    wanted = set(state.wishlist)
    return wanted.issubset(state.coder_feedback) and wanted.issubset(state.pm_decisions)


def partition_votes(votes):
    scope = FinalScope()
    for fid, include in votes.items():
        (scope.kept if include else scope.cut).append(fid)
    return scope


def apply(state: GameState, players: Dict[str, str], event, rules: Rules = Rules()) -> Transition:
    """Compute the room's next state for ``event``.

    The inputs are not modified.
    """
    new_state = state.copy()
    new_players = dict(players)
    result = Transition(state=new_state, players=new_players, previous_phase=state.phase)

    if isinstance(event, JoinRoom):
        new_players[event.role] = event.name
        if new_state.phase == WAITING and all_roles_filled(new_players):
            new_state.phase = DESIGN
            result.start_timer = True

    elif isinstance(event, SubmitWishlist):
        new_state.wishlist = list(event.wishlist)
        if new_state.phase == DESIGN and new_state.wishlist:
            new_state.phase = REVIEW

    elif isinstance(event, SubmitCoderFeedback):
        new_state.coder_feedback = dict(event.feedback)
        if new_state.phase == REVIEW and review_complete(new_state, rules):
            new_state.phase = DECISION

    elif isinstance(event, SubmitPMDecisions):
        new_state.pm_decisions = dict(event.decisions)
        if new_state.phase == REVIEW and review_complete(new_state, rules):
            new_state.phase = DECISION

    elif isinstance(event, SubmitFinalVotes):
        new_state.final_scope = partition_votes(event.votes)
        new_state.phase = SUMMARY

    elif isinstance(event, RestartWorkshop):
        result.state = GameState.initial(rules.session_budget)
        result.players = {}
        result.stop_timer = True
        result.reset = True

    elif isinstance(event, Tick):
        if new_state.time_remaining <= 0:
            # Already expired; the countdown should be gone
            new_state.time_remaining = 0
            result.stop_timer = True
            result.broadcast = False
        else:
            new_state.time_remaining -= 1
            if new_state.time_remaining == 0:
                new_state.phase = SUMMARY
                result.stop_timer = True

    elif isinstance(event, SubmitReflection):
        result.broadcast = False

    else:
        raise TypeError(f'unsupported workshop event: {event!r}')

    return result
