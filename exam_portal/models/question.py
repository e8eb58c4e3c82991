"""
Question and Option Models
Questions belong to one exam; options belong to one question
"""
from exam_portal.extensions import db


class QuestionType:
    """Supported question types"""
    MCQ = 'MCQ'
    TRUE_FALSE = 'TRUE_FALSE'
    SHORT_ANSWER = 'SHORT_ANSWER'

    OBJECTIVE = (MCQ, TRUE_FALSE)
    ALL = (MCQ, TRUE_FALSE, SHORT_ANSWER)

    # Accepted spellings on input
    ALIASES = {'MULTIPLE_CHOICE': MCQ}

    @classmethod
    def normalize(cls, value):
        """Return the canonical type name, or None if unknown"""
        if not isinstance(value, str):
            return None
        value = value.strip().upper()
        value = cls.ALIASES.get(value, value)
        return value if value in cls.ALL else None


class Question(db.Model):
    """Question model"""
    __tablename__ = 'question'

    id = db.Column(db.Integer, primary_key=True)
    exam_id = db.Column(db.Integer, db.ForeignKey('exam.id'), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(20), nullable=False, default=QuestionType.MCQ)
    order = db.Column(db.Integer, default=0)

    # Scoring
    points = db.Column(db.Float, default=1.0, nullable=False)

    options = db.relationship(
        'Option', backref='question', lazy=True,
        order_by='Option.id', cascade='all, delete-orphan'
    )

    def __repr__(self):
        return f'<Question {self.id}: {self.text[:50]}...>'

    def to_dict(self, include_answers=True):
        return {
            'id': self.id,
            'text': self.text,
            'type': self.type,
            'order': self.order,
            'points': self.points,
            'options': [opt.to_dict(include_answers=include_answers) for opt in self.options],
        }


class Option(db.Model):
    """Answer option for MCQ / TRUE_FALSE questions"""
    __tablename__ = 'question_option'

    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey('question.id'), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False)
    is_correct = db.Column(db.Boolean, default=False, nullable=False)

    def __repr__(self):
        return f'<Option {self.id} for Q{self.question_id}>'

    def to_dict(self, include_answers=True):
        data = {'id': self.id, 'text': self.text}
        if include_answers:
            data['isCorrect'] = self.is_correct
        return data
