"""
Authentication Routes
Teacher login and logout
"""
import logging

from flask import Blueprint, jsonify, session

from exam_portal.errors import AuthenticationError, ValidationError
from exam_portal.models import Teacher
from exam_portal.utils import get_current_actor, get_json_body, login_teacher

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Teacher login with username + password"""
    body = get_json_body()
    username = body.get('username')
    password = body.get('password')

    if not isinstance(username, str) or not username or not isinstance(password, str) or not password:
        raise ValidationError('Username and password are required')

    teacher = Teacher.query.filter_by(username=username).first()
    if not teacher or not teacher.check_password(password):
        logger.warning('Failed login for teacher %r', username)
        raise AuthenticationError('Invalid credentials')

    login_teacher(teacher)
    logger.info('Teacher %s logged in', teacher.id)
    return jsonify({'message': 'Login successful', 'teacherId': teacher.id})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Teacher logout"""
    session.clear()
    return jsonify({'message': 'Logged out successfully.'})


@auth_bp.route('/me')
def me():
    """Current teacher session"""
    actor = get_current_actor()
    if actor is None or not actor.is_teacher:
        raise AuthenticationError()
    return jsonify({'teacherId': actor.id, 'username': session.get('username')})
