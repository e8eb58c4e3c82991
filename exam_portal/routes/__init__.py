"""
Routes Package
Exports all route blueprints
"""
from exam_portal.routes.auth import auth_bp
from exam_portal.routes.teacher import teacher_bp
from exam_portal.routes.student import student_bp
from exam_portal.routes.public import public_bp

__all__ = ['auth_bp', 'teacher_bp', 'student_bp', 'public_bp']
