"""
Identifier derivation shared by both parties of a session.

Both functions are pure: the patient UI, the doctor UI and the booking path
all recompute the same value from the same inputs, with no lookup or handshake.
"""
import re
from typing import Any, Optional

from .exceptions import IdentifierUnavailable

ROOM_PREFIX = 'mindflow-'

_ROOM_UNSAFE = re.compile(r'[^a-z0-9-]')


def conversation_id(party_a: Any, party_b: Any) -> str:
    """Order-independent id for the conversation between two parties"""
    first, second = sorted((str(party_a), str(party_b)))
    return f"{first}-{second}"


def video_room_id(session_id: Optional[str], internal_key: Any = None) -> str:
    """
    Derive the video-provider room name for a session.

    Args:
        session_id: stable human-readable session identifier
        internal_key: fallback when session_id is missing

    Raises:
        IdentifierUnavailable: if neither identifier is present
    """
    if session_id:
        source = str(session_id)
    elif internal_key is not None and str(internal_key) != '':
        source = str(internal_key)
    else:
        raise IdentifierUnavailable()

    return _ROOM_UNSAFE.sub('-', f"{ROOM_PREFIX}{source}".lower())


def room_id_for_session(session) -> str:
    """video_room_id() applied to a Session record"""
    return video_room_id(session.session_id, session.id)


def is_session_room(room_name: str) -> bool:
    return room_name.startswith(ROOM_PREFIX)
