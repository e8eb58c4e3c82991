"""
Student Routes
Start an attempt, load the exam paper, submit answers, view the result
"""
from flask import Blueprint, jsonify

from exam_portal.services import AttemptService
from exam_portal.utils import get_current_actor, get_json_body, login_student

student_bp = Blueprint('student', __name__)


@student_bp.route('/start', methods=['POST'])
def start_attempt():
    """Begin an exam; the student is identified by name, section and grade"""
    exam_id, fields = AttemptService.parse_start_payload(get_json_body())
    submission = AttemptService.start_attempt(exam_id, **fields)
    login_student(submission.student)
    return jsonify({'submission': {'id': submission.id}}), 201


@student_bp.route('/<int:submission_id>/questions')
def exam_paper(submission_id):
    return jsonify(AttemptService.get_exam_paper(get_current_actor(), submission_id))


@student_bp.route('/<int:submission_id>/submit', methods=['POST'])
def submit_answers(submission_id):
    outcome = AttemptService.submit_answers(get_current_actor(), submission_id, get_json_body())
    outcome['message'] = 'Your answers have been submitted successfully!'
    return jsonify(outcome)


@student_bp.route('/<int:submission_id>/result')
def result(submission_id):
    return jsonify({'submission': AttemptService.get_result(get_current_actor(), submission_id)})
