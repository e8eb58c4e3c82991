"""
Teacher Model
Exam owners; authenticate with username + password
"""
from werkzeug.security import generate_password_hash, check_password_hash

from exam_portal.extensions import db
from exam_portal.utils.helpers import now_utc


class Teacher(db.Model):
    """Teacher model"""
    __tablename__ = 'teacher'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)

    exams = db.relationship('Exam', backref='teacher', lazy=True)

    def __repr__(self):
        return f'<Teacher {self.username}>'

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)
