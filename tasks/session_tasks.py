"""
Celery tasks for session reminders and no-show sweeps
"""
import logging

from mindflow.extensions import celery
from mindflow.services import get_services

logger = logging.getLogger(__name__)


@celery.task(name='tasks.send_session_reminders')
def send_session_reminders():
    """
    Email both participants of sessions starting within the reminder lead time

    Returns:
        dict: Reminded session ids
    """
    try:
        result = get_services().reminders.send_due_reminders()
        return {'success': True, **result}
    except Exception as e:
        logger.error(f"Error sending session reminders: {e}", exc_info=True)
        return {'success': False, 'error': str(e)}


@celery.task(name='tasks.mark_no_shows')
def mark_no_shows():
    """
    Mark scheduled/confirmed sessions whose join window has closed as no-show

    Returns:
        dict: Marked and skipped session ids
    """
    try:
        result = get_services().reminders.mark_no_shows()
        return {'success': True, **result}
    except Exception as e:
        logger.error(f"Error marking no-shows: {e}", exc_info=True)
        return {'success': False, 'error': str(e)}
