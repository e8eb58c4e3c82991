"""
Utils Package
"""
from exam_portal.utils.helpers import (
    now_utc,
    as_utc,
    isoformat,
    to_local_time,
    parse_iso_datetime,
    get_json_body,
    Actor,
    get_current_actor,
    login_teacher,
    login_student,
    require_teacher
)
from exam_portal.utils.logging_config import configure_logging

__all__ = [
    'now_utc',
    'as_utc',
    'isoformat',
    'to_local_time',
    'parse_iso_datetime',
    'get_json_body',
    'Actor',
    'get_current_actor',
    'login_teacher',
    'login_student',
    'require_teacher',
    'configure_logging'
]
