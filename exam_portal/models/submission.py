"""
Submission and Answer Models
One student's attempt at one exam, and the answers recorded at submit time
"""
from exam_portal.extensions import db
from exam_portal.utils.helpers import now_utc, isoformat


class SubmissionStatus:
    """Attempt lifecycle states"""
    STARTED = 'STARTED'
    SUBMITTED = 'SUBMITTED'
    GRADED = 'GRADED'

    ALL = (STARTED, SUBMITTED, GRADED)


class Submission(db.Model):
    """Exam attempt model"""
    __tablename__ = 'submission'

    id = db.Column(db.Integer, primary_key=True)
    student_info_id = db.Column(db.Integer, db.ForeignKey('student_info.id'), nullable=False, index=True)
    exam_id = db.Column(db.Integer, db.ForeignKey('exam.id'), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=SubmissionStatus.STARTED)

    # NULL until the attempt is submitted
    score = db.Column(db.Float, nullable=True)
    is_fully_graded = db.Column(db.Boolean, nullable=False, default=False)

    started_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    submitted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    student = db.relationship('StudentInfo', lazy='joined')
    answers = db.relationship(
        'Answer', backref='submission', lazy=True, cascade='all, delete-orphan'
    )

    __table_args__ = (
        db.UniqueConstraint('student_info_id', 'exam_id', name='unique_attempt_per_student'),
    )

    def __repr__(self):
        return f'<Submission {self.id} exam={self.exam_id} {self.status}>'

    def to_summary_dict(self):
        return {
            'id': self.id,
            'examId': self.exam_id,
            'status': self.status,
            'score': self.score,
            'isFullyGraded': self.is_fully_graded,
            'startedAt': isoformat(self.started_at),
            'submittedAt': isoformat(self.submitted_at),
            'student': self.student.to_dict() if self.student else None,
        }


class Answer(db.Model):
    """Answer to one question within a submission"""
    __tablename__ = 'answer'

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(db.Integer, db.ForeignKey('submission.id'), nullable=False, index=True)
    question_id = db.Column(
        db.Integer, db.ForeignKey('question.id', ondelete='CASCADE'), nullable=False, index=True
    )
    selected_option_id = db.Column(
        db.Integer, db.ForeignKey('question_option.id', ondelete='SET NULL'), nullable=True
    )
    text_answer = db.Column(db.Text, nullable=True)

    # NULL on both means "awaiting manual grading"
    is_correct = db.Column(db.Boolean, nullable=True)
    points_awarded = db.Column(db.Float, nullable=True)

    question = db.relationship('Question')
    selected_option = db.relationship('Option')

    __table_args__ = (
        db.UniqueConstraint('submission_id', 'question_id', name='unique_answer_per_question'),
    )

    def __repr__(self):
        return f'<Answer Q{self.question_id} in submission {self.submission_id}>'

    def to_dict(self):
        question = self.question
        return {
            'id': self.id,
            'questionId': self.question_id,
            'questionText': question.text if question else None,
            'questionType': question.type if question else None,
            'order': question.order if question else None,
            'pointsPossible': question.points if question else None,
            'options': [opt.to_dict() for opt in question.options] if question else [],
            'selectedOptionId': self.selected_option_id,
            'textAnswer': self.text_answer,
            'isCorrect': self.is_correct,
            'pointsAwarded': self.points_awarded,
        }
