"""
StudentInfo Model
Student identity, found-or-created when an attempt starts
"""
from exam_portal.extensions import db


class StudentInfo(db.Model):
    """Student identity model"""
    __tablename__ = 'student_info'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    section = db.Column(db.String(50), nullable=False)
    grade = db.Column(db.String(50), nullable=False)

    __table_args__ = (
        db.UniqueConstraint('name', 'section', 'grade', name='unique_student_identity'),
    )

    def __repr__(self):
        return f'<StudentInfo {self.name} ({self.grade}-{self.section})>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'section': self.section,
            'grade': self.grade,
        }
