"""
Video Token Service
Issues short-lived room credentials. For session rooms (``mindflow-`` prefix)
the session's link_expires_at gate is enforced first; the join window is not
consulted here.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from flask_jwt_extended import create_access_token

from mindflow.utils.timeutils import utcnow
from .exceptions import LinkExpired, RequestValidationError
from .identifiers import is_session_room

logger = logging.getLogger(__name__)

# JWT 'type' claim of video credentials; the API refuses these as access tokens
VIDEO_TOKEN_TYPE = 'video'


class VideoTokenService:

    def __init__(self, session_repository, token_ttl_seconds: int = 900):
        self.sessions = session_repository
        self.token_ttl = timedelta(seconds=token_ttl_seconds)

    def check_link(self, room_name: str, now: datetime) -> None:
        """Reject token requests for a session room whose link has expired"""
        if not is_session_room(room_name):
            return
        session = self.sessions.find_by_room_id(room_name)
        if session is not None and session.link_expires_at is not None and now > session.link_expires_at:
            raise LinkExpired(room_name)

    def issue_token(self, room_name: Optional[str], uid: int = 0, now: Optional[datetime] = None) -> dict:
        now = now or utcnow()
        room_name = (room_name or '').strip()
        if not room_name:
            raise RequestValidationError('Channel name is required', field='channel')

        self.check_link(room_name, now)

        token = create_access_token(
            identity=f"{room_name}:{uid}",
            additional_claims={'type': VIDEO_TOKEN_TYPE, 'channel': room_name, 'uid': uid},
            expires_delta=self.token_ttl,
        )
        expires_at = int((now + self.token_ttl).replace(tzinfo=timezone.utc).timestamp())
        logger.info("Generated video token for channel %s uid %s", room_name, uid)
        return {
            'token': token,
            'channel': room_name,
            'uid': uid,
            'expires_at': expires_at,
        }
