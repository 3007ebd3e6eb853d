"""
Celery tasks module
Import all tasks here so Celery can discover them
"""
from . import session_tasks

__all__ = ['session_tasks']
