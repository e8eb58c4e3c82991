from flask import Blueprint, jsonify

from exam_portal.errors import NotFoundError
from exam_portal.extensions import db
from exam_portal.models import Exam
from exam_portal.services import AnnouncementService, ScheduleService

public_bp = Blueprint('public', __name__)


@public_bp.route('/health')
def health():
    return jsonify({'status': 'ok'})


@public_bp.route('/api/exams')
def published_exams():
    """Exams students can start"""
    exams = Exam.query.filter_by(is_published=True).order_by(Exam.created_at.desc()).all()
    return jsonify({'exams': [exam.to_public_dict() for exam in exams]})


@public_bp.route('/api/exams/<int:exam_id>/public')
def exam_public(exam_id):
    """Exam header and instructions shown before starting"""
    exam = db.session.get(Exam, exam_id)
    if exam is None or not exam.is_published:
        raise NotFoundError(f'Exam with ID {exam_id} not found.')
    return jsonify({'exam': exam.to_public_dict()})


@public_bp.route('/api/announcements')
def announcements():
    return jsonify({'announcements': [a.to_dict() for a in AnnouncementService.list_public()]})


@public_bp.route('/api/schedules')
def schedules():
    return jsonify({'schedules': [s.to_dict() for s in ScheduleService.list_public()]})
