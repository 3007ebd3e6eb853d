from mindflow.extensions import db
from mindflow.utils.timeutils import utcnow


class TimestampMixin:
    """created_at / updated_at columns maintained by SQLAlchemy"""
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
