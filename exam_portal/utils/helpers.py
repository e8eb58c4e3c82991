"""
Helper Functions
Utility functions used across the application
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import wraps

import pytz
from flask import current_app, request, session

from exam_portal.errors import AuthenticationError, ValidationError


def now_utc():
    """Get current UTC timestamp"""
    return datetime.now(timezone.utc)


def as_utc(dt):
    """Attach UTC to naive datetimes (SQLite drops tzinfo on load)"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def isoformat(dt):
    """ISO 8601 string in UTC, or None"""
    dt = as_utc(dt)
    return dt.isoformat() if dt else None


def to_local_time(utc_dt):
    """Convert UTC datetime to the configured display timezone"""
    if not utc_dt:
        return None
    tz_name = current_app.config.get('TIMEZONE', 'UTC') if current_app else 'UTC'
    return as_utc(utc_dt).astimezone(pytz.timezone(tz_name))


def parse_iso_datetime(value, field):
    """Parse an ISO 8601 string into an aware UTC datetime"""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(errors={field: ['Invalid ISO 8601 date format.']})
    raw = value.strip()
    if raw.endswith('Z'):
        raw = raw[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(errors={field: ['Invalid ISO 8601 date format.']})
    return as_utc(parsed)


def get_json_body():
    """Request body as a dict; anything else is a ValidationError"""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError('Invalid request: Body must be a valid JSON object.')
    return body


# ========================================
# ACTOR IDENTITY
# ========================================

@dataclass(frozen=True)
class Actor:
    """Authenticated principal passed explicitly into every core operation"""
    role: str
    id: int

    TEACHER = 'teacher'
    STUDENT = 'student'

    @property
    def is_teacher(self):
        return self.role == self.TEACHER

    @property
    def is_student(self):
        return self.role == self.STUDENT

    @classmethod
    def teacher(cls, teacher_id):
        return cls(cls.TEACHER, teacher_id)

    @classmethod
    def student(cls, student_id):
        return cls(cls.STUDENT, student_id)


def get_current_actor():
    """Current actor from the session, or None for anonymous visitors"""
    role = session.get('role')
    if role == Actor.TEACHER and session.get('teacher_id') is not None:
        return Actor.teacher(session['teacher_id'])
    if role == Actor.STUDENT and session.get('student_id') is not None:
        return Actor.student(session['student_id'])
    return None


def login_teacher(teacher):
    session.clear()
    session['role'] = Actor.TEACHER
    session['teacher_id'] = teacher.id
    session['username'] = teacher.username


def login_student(student):
    """Remember the student behind the attempt that was just started"""
    session['role'] = Actor.STUDENT
    session['student_id'] = student.id
    session['username'] = student.name


# Decorators
def require_teacher(f):
    """
    Decorator to require a teacher session
    Passes the teacher Actor as the first argument
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        actor = get_current_actor()
        if actor is None or not actor.is_teacher:
            raise AuthenticationError()

        from exam_portal.extensions import db
        from exam_portal.models import Teacher

        if db.session.get(Teacher, actor.id) is None:
            session.clear()
            raise AuthenticationError()
        return f(actor, *args, **kwargs)
    return decorated_function
