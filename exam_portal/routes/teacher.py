"""
Teacher Routes
Exams, questions, submissions, grading, announcements, schedules
"""
from flask import Blueprint, jsonify

from exam_portal.services import (
    AnnouncementService, AttemptService, ExamService, GradingService, ScheduleService
)
from exam_portal.utils import get_json_body, require_teacher

teacher_bp = Blueprint('teacher', __name__)


# ========================================
# EXAMS
# ========================================

@teacher_bp.route('/exams', methods=['GET'])
@require_teacher
def list_exams(actor):
    exams = ExamService.list_exams(actor)
    return jsonify({'exams': [exam.to_dict() for exam in exams]})


@teacher_bp.route('/exams', methods=['POST'])
@require_teacher
def create_exam(actor):
    exam = ExamService.create_exam(actor, get_json_body())
    return jsonify({'message': 'Exam created successfully', 'exam': exam.to_dict()}), 201


@teacher_bp.route('/exams/<int:exam_id>', methods=['GET'])
@require_teacher
def get_exam(actor, exam_id):
    exam = ExamService.get_owned_exam(actor, exam_id)
    return jsonify({'exam': exam.to_dict(include_questions=True)})


@teacher_bp.route('/exams/<int:exam_id>', methods=['PATCH'])
@require_teacher
def update_exam(actor, exam_id):
    exam = ExamService.update_exam(actor, exam_id, get_json_body())
    return jsonify({'message': 'Exam updated successfully', 'exam': exam.to_dict()})


@teacher_bp.route('/exams/<int:exam_id>', methods=['DELETE'])
@require_teacher
def delete_exam(actor, exam_id):
    ExamService.delete_exam(actor, exam_id)
    return jsonify({'message': 'Exam deleted successfully'})


@teacher_bp.route('/exams/<int:exam_id>/questions', methods=['PUT'])
@require_teacher
def replace_questions(actor, exam_id):
    exam = ExamService.replace_questions(actor, exam_id, get_json_body())
    return jsonify({
        'message': 'Exam updated successfully',
        'exam': exam.to_dict(include_questions=True),
    })


@teacher_bp.route('/exams/<int:exam_id>/submissions', methods=['GET'])
@require_teacher
def exam_submissions(actor, exam_id):
    exam, submissions = ExamService.list_submissions(actor, exam_id)
    return jsonify({
        'exam': {'id': exam.id, 'title': exam.title},
        'totalPossibleScore': exam.total_possible_score(),
        'submissions': [s.to_summary_dict() for s in submissions],
    })


# ========================================
# GRADING
# ========================================

@teacher_bp.route('/submissions/<int:submission_id>/details', methods=['GET'])
@require_teacher
def submission_details(actor, submission_id):
    return jsonify({'submission': AttemptService.get_result(actor, submission_id)})


@teacher_bp.route('/submissions/<int:submission_id>/grade', methods=['PUT'])
@require_teacher
def save_grades(actor, submission_id):
    submission = GradingService.save_manual_grades(actor, submission_id, get_json_body())
    return jsonify({
        'message': 'Grades saved successfully!',
        'submission': {
            'id': submission.id,
            'score': submission.score,
            'isFullyGraded': submission.is_fully_graded,
            'status': submission.status,
        },
    })


# ========================================
# ANNOUNCEMENTS
# ========================================

@teacher_bp.route('/announcements', methods=['GET'])
@require_teacher
def list_announcements(actor):
    announcements = AnnouncementService.list_for_teacher(actor)
    return jsonify({'announcements': [a.to_dict() for a in announcements]})


@teacher_bp.route('/announcements', methods=['POST'])
@require_teacher
def create_announcement(actor):
    announcement = AnnouncementService.create(actor, get_json_body())
    return jsonify({
        'message': 'Announcement created successfully',
        'announcement': announcement.to_dict(),
    }), 201


@teacher_bp.route('/announcements/<int:announcement_id>', methods=['PATCH'])
@require_teacher
def update_announcement(actor, announcement_id):
    announcement = AnnouncementService.update(actor, announcement_id, get_json_body())
    return jsonify({
        'message': 'Announcement updated successfully',
        'announcement': announcement.to_dict(),
    })


@teacher_bp.route('/announcements/<int:announcement_id>', methods=['DELETE'])
@require_teacher
def delete_announcement(actor, announcement_id):
    AnnouncementService.delete(actor, announcement_id)
    return jsonify({'message': 'Announcement deleted successfully'})


# ========================================
# SCHEDULES
# ========================================

@teacher_bp.route('/schedules', methods=['GET'])
@require_teacher
def list_schedules(actor):
    schedules = ScheduleService.list_for_teacher(actor)
    return jsonify({'schedules': [s.to_dict() for s in schedules]})


@teacher_bp.route('/schedules', methods=['POST'])
@require_teacher
def create_schedule(actor):
    schedule = ScheduleService.create(actor, get_json_body())
    return jsonify({
        'message': 'Scheduled exam created successfully',
        'schedule': schedule.to_dict(),
    }), 201


@teacher_bp.route('/schedules/<int:schedule_id>', methods=['DELETE'])
@require_teacher
def delete_schedule(actor, schedule_id):
    ScheduleService.delete(actor, schedule_id)
    return jsonify({'message': 'Scheduled exam deleted successfully'})
