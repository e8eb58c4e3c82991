"""
Exam Model
A named assessment owned by one teacher
"""
from exam_portal.extensions import db
from exam_portal.utils.helpers import now_utc, isoformat


class Exam(db.Model):
    """Exam model"""
    __tablename__ = 'exam'

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('teacher.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    header = db.Column(db.Text)
    instructions = db.Column(db.Text)

    # NULL means no countdown
    duration_seconds = db.Column(db.Integer, nullable=True)

    is_published = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    # Relationships
    questions = db.relationship(
        'Question', backref='exam', lazy=True,
        order_by='Question.order', cascade='all, delete-orphan'
    )
    submissions = db.relationship(
        'Submission', backref='exam', lazy=True, cascade='all, delete-orphan'
    )

    def __repr__(self):
        return f'<Exam {self.title}>'

    def total_possible_score(self):
        """Sum of question point values (one point per question by default)"""
        return sum(q.points for q in self.questions)

    def to_dict(self, include_questions=False, include_answers=True):
        data = {
            'id': self.id,
            'teacherId': self.teacher_id,
            'title': self.title,
            'header': self.header,
            'instructions': self.instructions,
            'durationSeconds': self.duration_seconds,
            'isPublished': self.is_published,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
        if include_questions:
            data['questions'] = [
                q.to_dict(include_answers=include_answers) for q in self.questions
            ]
        return data

    def to_public_dict(self):
        """Exam summary shown to students before starting"""
        return {
            'id': self.id,
            'title': self.title,
            'header': self.header,
            'instructions': self.instructions,
            'durationSeconds': self.duration_seconds,
            'questionCount': len(self.questions),
        }
