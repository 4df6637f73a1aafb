"""Inbound workshop events and the wire-payload parser.

Clients may send either the explicit form (``{"roomCode": ..., "wishlist":
[...]}``) or the bare form the web client emits (just the list or mapping).
A bare event carries ``room_code=None`` and is resolved against the room the
connection joined.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from scoping.models import ROLES, FeatureId
from .errors import InvalidPayload, UnknownEvent


@dataclass(frozen=True)
class JoinRoom:
    room_code: str
    role: str
    name: str


@dataclass(frozen=True)
class SubmitWishlist:
    room_code: Optional[str]
    wishlist: List[FeatureId] = field(default_factory=list)


@dataclass(frozen=True)
class SubmitCoderFeedback:
    room_code: Optional[str]
    feedback: Dict[FeatureId, Dict[str, Any]] = field(default_factory=dict)


@dataclass(frozen=True)
class SubmitPMDecisions:
    room_code: Optional[str]
    decisions: Dict[FeatureId, Dict[str, Any]] = field(default_factory=dict)


@dataclass(frozen=True)
class SubmitFinalVotes:
    room_code: Optional[str]
    votes: Dict[FeatureId, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class SubmitReflection:
    role: str
    reflection: str
    room_code: Optional[str] = None


@dataclass(frozen=True)
class RestartWorkshop:
    room_code: Optional[str] = None


@dataclass(frozen=True)
class Tick:
    room_code: Optional[str] = None


def feature_id(raw: Any, event: str) -> FeatureId:
    # bool is an int subclass; true/false is never a feature id
    if isinstance(raw, bool):
        raise InvalidPayload(f'invalid feature id: {raw!r}', event)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise InvalidPayload('feature id must not be empty', event)
        try:
            number = int(text)
        except ValueError:
            return text
        # "01" and "1" would collapse onto the same feature
        if str(number) != text:
            raise InvalidPayload(f'feature id {raw!r} is not in canonical form', event)
        return number
    raise InvalidPayload(f'invalid feature id: {raw!r}', event)


def _room_code(payload: Mapping, event: str, required: bool = False) -> Optional[str]:
    code = payload.get('roomCode')
    if code is None or code == '':
        if required:
            raise InvalidPayload('roomCode is required', event)
        return None
    if not isinstance(code, str) or not code.strip():
        raise InvalidPayload('roomCode must be a non-empty string', event)
    return code.strip()


def _unwrap(data: Any, key: str, event: str):
    """Split ``data`` into (room_code, body) for bare and explicit payloads."""
    if isinstance(data, Mapping) and key in data:
        return _room_code(data, event), data[key]
    return None, data


def _assessments(body: Any, event: str) -> Dict[FeatureId, Dict[str, Any]]:
    if not isinstance(body, Mapping):
        raise InvalidPayload('expected a mapping of feature id to assessment', event)
    out = {}
    for raw_id, entry in body.items():
        if not isinstance(entry, Mapping):
            raise InvalidPayload(f'assessment for {raw_id!r} must be an object', event)
        out[feature_id(raw_id, event)] = dict(entry)
    return out


def _parse_join(data, event):
    if not isinstance(data, Mapping):
        raise InvalidPayload('expected {roomCode, role, name}', event)
    code = _room_code(data, event, required=True)
    role = data.get('role')
    if role not in ROLES:
        raise InvalidPayload(f'role must be one of {", ".join(ROLES)}', event)
    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        raise InvalidPayload('name is required', event)
    return JoinRoom(room_code=code, role=role, name=name.strip())


def _parse_wishlist(data, event):
    code, body = _unwrap(data, 'wishlist', event)
    if not isinstance(body, (list, tuple)):
        raise InvalidPayload('wishlist must be a list of feature ids', event)
    return SubmitWishlist(room_code=code, wishlist=[feature_id(i, event) for i in body])


def _parse_coder_feedback(data, event):
    code, body = _unwrap(data, 'feedback', event)
    return SubmitCoderFeedback(room_code=code, feedback=_assessments(body, event))


def _parse_pm_decisions(data, event):
    code, body = _unwrap(data, 'decisions', event)
    return SubmitPMDecisions(room_code=code, decisions=_assessments(body, event))


def _parse_final_votes(data, event):
    code, body = _unwrap(data, 'votes', event)
    if not isinstance(body, Mapping):
        raise InvalidPayload('votes must map feature id to true/false', event)
    votes = {}
    for raw_id, include in body.items():
        if not isinstance(include, bool):
            raise InvalidPayload(f'vote for {raw_id!r} must be true or false', event)
        votes[feature_id(raw_id, event)] = include
    return SubmitFinalVotes(room_code=code, votes=votes)


def _parse_reflection(data, event):
    if not isinstance(data, Mapping):
        raise InvalidPayload('expected {role, reflection}', event)
    reflection = data.get('reflection')
    if reflection is None:
        reflection = ''
    if not isinstance(reflection, str):
        raise InvalidPayload('reflection must be text', event)
    return SubmitReflection(
        role=str(data.get('role') or 'unknown'),
        reflection=reflection,
        room_code=_room_code(data, event),
    )


def _parse_restart(data, event):
    if data is None:
        return RestartWorkshop()
    if not isinstance(data, Mapping):
        raise InvalidPayload('restartWorkshop takes no payload or {roomCode}', event)
    return RestartWorkshop(room_code=_room_code(data, event))


_PARSERS = {
    'joinRoom': _parse_join,
    'submitWishlist': _parse_wishlist,
    'submitCoderFeedback': _parse_coder_feedback,
    'submitPMDecisions': _parse_pm_decisions,
    'submitFinalVotes': _parse_final_votes,
    'submitReflection': _parse_reflection,
    'restartWorkshop': _parse_restart,
}

EVENT_NAMES = tuple(_PARSERS)


def parse_event(name: str, data: Any = None):
    """Build a workshop event from its wire name and payload.

    Raises ``UnknownEvent`` for names outside the catalog and
    ``InvalidPayload`` for malformed payloads.
    """
    parser = _PARSERS.get(name)
    if parser is None:
        raise UnknownEvent('Unknown event', name)
    return parser(data, name)
