"""
Notice Services
Teacher announcements and exam schedules, plus their public listings
"""
import logging

from sqlalchemy import or_

from exam_portal.errors import NotFoundError, ValidationError
from exam_portal.extensions import db, atomic
from exam_portal.models import Announcement, ScheduledExam
from exam_portal.utils.helpers import now_utc, parse_iso_datetime

logger = logging.getLogger(__name__)


def _text(payload, key, errors, min_length=1, label=None, required=True):
    value = payload.get(key)
    label = label or key
    if value is None and not required:
        return None
    if not isinstance(value, str):
        errors[key] = [f'{label} is required.' if required else f'{label} must be a string.']
        return None
    value = value.strip()
    if required and len(value) < min_length:
        if min_length > 1:
            errors[key] = [f'{label} must be at least {min_length} characters long.']
        else:
            errors[key] = [f'{label} is required.']
        return None
    return value or None


def _flag(payload, key, errors, default):
    if key not in payload or payload[key] is None:
        return default
    if not isinstance(payload[key], bool):
        errors[key] = [f'{key} must be a boolean.']
        return default
    return payload[key]


class AnnouncementService:
    """Announcements owned by a teacher"""

    @staticmethod
    def parse_payload(payload, partial=False):
        if not isinstance(payload, dict):
            raise ValidationError('Invalid data')

        errors = {}
        fields = {}
        if 'title' in payload or not partial:
            fields['title'] = _text(payload, 'title', errors, min_length=3, label='Title')
        if 'content' in payload or not partial:
            fields['content'] = _text(payload, 'content', errors, min_length=10, label='Content')
        if 'expiresAt' in payload:
            expires_at = payload['expiresAt']
            if expires_at is None:
                fields['expires_at'] = None
            else:
                try:
                    fields['expires_at'] = parse_iso_datetime(expires_at, 'expiresAt')
                except ValidationError as exc:
                    errors.update(exc.errors)
        if 'isPublished' in payload or not partial:
            fields['is_published'] = _flag(payload, 'isPublished', errors, default=True)

        if errors:
            raise ValidationError('Invalid data', errors=errors)
        return fields

    @staticmethod
    def create(actor, payload):
        fields = AnnouncementService.parse_payload(payload)
        with atomic():
            announcement = Announcement(teacher_id=actor.id, **fields)
            db.session.add(announcement)
        logger.info('Teacher %s created announcement %s', actor.id, announcement.id)
        return announcement

    @staticmethod
    def list_for_teacher(actor):
        return (
            Announcement.query
            .filter_by(teacher_id=actor.id)
            .order_by(Announcement.created_at.desc(), Announcement.id.desc())
            .all()
        )

    @staticmethod
    def _get_owned(actor, announcement_id):
        announcement = Announcement.query.filter_by(
            id=announcement_id, teacher_id=actor.id
        ).first()
        if announcement is None:
            raise NotFoundError('Announcement not found or not authorized')
        return announcement

    @staticmethod
    def update(actor, announcement_id, payload):
        fields = AnnouncementService.parse_payload(payload, partial=True)
        with atomic():
            announcement = AnnouncementService._get_owned(actor, announcement_id)
            for key, value in fields.items():
                setattr(announcement, key, value)
        return announcement

    @staticmethod
    def delete(actor, announcement_id):
        with atomic():
            db.session.delete(AnnouncementService._get_owned(actor, announcement_id))
        logger.info('Teacher %s deleted announcement %s', actor.id, announcement_id)

    @staticmethod
    def list_public():
        """Published announcements that have not expired, newest first"""
        now = now_utc()
        return (
            Announcement.query
            .filter(Announcement.is_published.is_(True))
            .filter(or_(Announcement.expires_at.is_(None), Announcement.expires_at > now))
            .order_by(Announcement.created_at.desc(), Announcement.id.desc())
            .all()
        )


class ScheduleService:
    """Exam schedule entries owned by a teacher"""

    @staticmethod
    def parse_payload(payload):
        if not isinstance(payload, dict):
            raise ValidationError('Invalid data')

        errors = {}
        fields = {
            'exam_title': _text(payload, 'examTitle', errors, label='Exam title'),
        }
        try:
            fields['exam_date'] = parse_iso_datetime(payload.get('examDate'), 'examDate')
        except ValidationError as exc:
            errors.update(exc.errors)

        for key, column in (('description', 'description'), ('duration', 'duration'),
                            ('course', 'course'), ('location', 'location'), ('notes', 'notes')):
            fields[column] = _text(payload, key, errors, required=False)
        fields['is_published'] = _flag(payload, 'isPublished', errors, default=True)

        if errors:
            raise ValidationError('Invalid data', errors=errors)
        return fields

    @staticmethod
    def create(actor, payload):
        fields = ScheduleService.parse_payload(payload)
        with atomic():
            schedule = ScheduledExam(teacher_id=actor.id, **fields)
            db.session.add(schedule)
        logger.info('Teacher %s scheduled "%s"', actor.id, fields['exam_title'])
        return schedule

    @staticmethod
    def list_for_teacher(actor):
        return (
            ScheduledExam.query
            .filter_by(teacher_id=actor.id)
            .order_by(ScheduledExam.exam_date.asc())
            .all()
        )

    @staticmethod
    def delete(actor, schedule_id):
        with atomic():
            schedule = ScheduledExam.query.filter_by(id=schedule_id, teacher_id=actor.id).first()
            if schedule is None:
                raise NotFoundError('Schedule not found or not authorized')
            db.session.delete(schedule)
        logger.info('Teacher %s deleted schedule %s', actor.id, schedule_id)

    @staticmethod
    def list_public():
        """Published schedules for exams still in the future, soonest first"""
        return (
            ScheduledExam.query
            .filter(ScheduledExam.is_published.is_(True))
            .filter(ScheduledExam.exam_date > now_utc())
            .order_by(ScheduledExam.exam_date.asc())
            .all()
        )
