"""
Service wiring. Built once per app in create_app() and stored on
app.extensions; request handlers fetch it with get_services().
"""
from flask import current_app

from mindflow.repositories import CheckInRepository, DirectoryRepository, SessionRepository
from .check_in_service import CheckInService
from .notes_service import ClinicalNotesService
from .reminder_service import ReminderService
from .session_service import SessionLifecycleEngine
from .video_token_service import VideoTokenService

EXTENSION_KEY = 'mindflow.services'


class ServiceRegistry:

    def __init__(self, db_session, config):
        self.db_session = db_session
        self.session_repository = SessionRepository(db_session)
        self.directory = DirectoryRepository(db_session)
        self.check_in_repository = CheckInRepository(db_session)

        self.engine = SessionLifecycleEngine(
            db_session,
            self.session_repository,
            self.directory,
            link_ttl_minutes=config.get('LINK_TTL_MINUTES', 15),
            default_duration=config.get('SESSION_DEFAULT_DURATION', 50),
            join_margin_minutes=config.get('JOIN_WINDOW_MINUTES', 15),
        )
        self.notes = ClinicalNotesService(db_session, self.session_repository, self.directory)
        self.check_ins = CheckInService(
            db_session, self.check_in_repository, self.session_repository, self.directory, self.engine,
        )
        self.video_tokens = VideoTokenService(
            self.session_repository, token_ttl_seconds=config.get('VIDEO_TOKEN_TTL_SECONDS', 900),
        )
        self.reminders = ReminderService(
            db_session, self.session_repository, self.engine, lead_minutes=config.get('REMINDER_LEAD_MINUTES', 60),
        )


def init_services(app, db_session):
    registry = ServiceRegistry(db_session, app.config)
    app.extensions[EXTENSION_KEY] = registry
    return registry


def get_services() -> ServiceRegistry:
    return current_app.extensions[EXTENSION_KEY]
