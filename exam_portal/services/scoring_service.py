"""
Scoring Service
Auto-grades objective questions and defers short answers to manual grading.
Pure: works on already-loaded questions, performs no I/O.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Union

from exam_portal.errors import ValidationError
from exam_portal.models.question import QuestionType


# ========================================
# GRADE VALUES
# ========================================

@dataclass(frozen=True)
class Correct:
    """Resolved, credit awarded"""
    points: float

    @property
    def is_correct(self):
        return True

    @property
    def points_awarded(self):
        return self.points


@dataclass(frozen=True)
class Incorrect:
    """Resolved, no credit"""

    @property
    def is_correct(self):
        return False

    @property
    def points_awarded(self):
        return 0.0


@dataclass(frozen=True)
class Ungraded:
    """Pending manual grading"""

    @property
    def is_correct(self):
        return None

    @property
    def points_awarded(self):
        return None


Grade = Union[Correct, Incorrect, Ungraded]


def grade_from_points(points):
    """Grade for a manually assigned point value (None clears the grade)"""
    if points is None:
        return Ungraded()
    if points > 0:
        return Correct(float(points))
    return Incorrect()


def grade_of(answer):
    """Grade stored on a persisted answer row"""
    return grade_from_points(answer.points_awarded)


# ========================================
# SUBMITTED / SCORED ANSWERS
# ========================================

@dataclass(frozen=True)
class SubmittedAnswer:
    question_id: int
    selected_option_id: Optional[int] = None
    text_answer: Optional[str] = None


@dataclass(frozen=True)
class ScoredAnswer:
    question_id: int
    selected_option_id: Optional[int]
    text_answer: Optional[str]
    grade: Grade

    @property
    def is_correct(self):
        return self.grade.is_correct

    @property
    def points_awarded(self):
        return self.grade.points_awarded


@dataclass
class ScoreSheet:
    answers: List[ScoredAnswer] = field(default_factory=list)
    ignored_question_ids: List[int] = field(default_factory=list)
    total_possible_score: float = 0.0

    @property
    def grades(self):
        return [a.grade for a in self.answers]

    @property
    def has_short_answers(self):
        return any(isinstance(a.grade, Ungraded) for a in self.answers)


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


class ScoringService:
    """Service for scoring answers"""

    @staticmethod
    def parse_answer_payload(payload, max_text_length=2000):
        """
        Validate the submit body structurally.

        Expects ``{"answers": [{questionId, selectedOptionId?, textAnswer?}]}``.
        Any defect rejects the whole payload with a ValidationError.

        Returns:
            list: SubmittedAnswer entries in payload order
        """
        if not isinstance(payload, dict) or not isinstance(payload.get('answers'), list):
            raise ValidationError(
                'Invalid answer data format.',
                errors={'answers': ['Expected a list of answers.']}
            )

        errors = {}
        parsed = []
        seen = set()

        for index, entry in enumerate(payload['answers']):
            key = f'answers[{index}]'
            if not isinstance(entry, dict):
                errors[key] = ['Each answer must be an object.']
                continue

            problems = []
            question_id = entry.get('questionId')
            option_id = entry.get('selectedOptionId')
            text = entry.get('textAnswer')

            if not _is_int(question_id):
                problems.append('questionId must be an integer.')
            elif question_id in seen:
                problems.append(f'Duplicate answer for question {question_id}.')

            if option_id is not None and not _is_int(option_id):
                problems.append('selectedOptionId must be an integer or null.')

            if text is not None:
                if not isinstance(text, str):
                    problems.append('textAnswer must be a string or null.')
                elif len(text) > max_text_length:
                    problems.append('Short answer too long.')
                elif not text.strip():
                    text = None

            if option_id is not None and text is not None:
                problems.append('Provide either selectedOptionId or textAnswer, not both.')

            if problems:
                errors[key] = problems
                continue

            seen.add(question_id)
            parsed.append(SubmittedAnswer(question_id, option_id, text))

        if errors:
            raise ValidationError('Invalid answer data format.', errors=errors)
        return parsed

    @staticmethod
    def grade_answer(question, submitted):
        """
        Grade one question against the submitted answer (None if unanswered)

        MCQ / TRUE_FALSE: full question points iff the selected option
        belongs to the question and is flagged correct.
        SHORT_ANSWER: always Ungraded.
        """
        if question.type in QuestionType.OBJECTIVE:
            if submitted is None or submitted.selected_option_id is None:
                return Incorrect()
            selected = next(
                (opt for opt in question.options if opt.id == submitted.selected_option_id),
                None
            )
            if selected is not None and selected.is_correct:
                return Correct(float(question.points if question.points is not None else 1))
            return Incorrect()

        if question.type == QuestionType.SHORT_ANSWER:
            return Ungraded()

        raise ValidationError(
            f'Unknown question type: {question.type}',
            errors={f'question {question.id}': ['Unknown question type.']}
        )

    @staticmethod
    def score_answers(questions, submitted_answers):
        """
        Score a submission against the exam's question set

        Every exam question gets exactly one ScoredAnswer. Answers for
        questions outside the exam are ignored. A field that does not fit
        the question type rejects the payload before anything is scored.

        Returns:
            ScoreSheet
        """
        by_question = {a.question_id: a for a in submitted_answers}
        exam_question_ids = {q.id for q in questions}

        errors = {}
        for question in questions:
            submitted = by_question.get(question.id)
            if question.type not in QuestionType.ALL:
                errors[f'question {question.id}'] = ['Unknown question type.']
            elif submitted is None:
                continue
            elif question.type in QuestionType.OBJECTIVE and submitted.text_answer is not None:
                errors[f'question {question.id}'] = [
                    'textAnswer does not apply to a multiple-choice or true/false question.'
                ]
            elif question.type == QuestionType.SHORT_ANSWER and submitted.selected_option_id is not None:
                errors[f'question {question.id}'] = [
                    'selectedOptionId does not apply to a short-answer question.'
                ]
        if errors:
            raise ValidationError('Invalid answer data format.', errors=errors)

        sheet = ScoreSheet(
            ignored_question_ids=[
                a.question_id for a in submitted_answers
                if a.question_id not in exam_question_ids
            ],
            total_possible_score=ScoringService.total_possible_score(questions),
        )

        for question in questions:
            submitted = by_question.get(question.id)
            sheet.answers.append(ScoredAnswer(
                question_id=question.id,
                selected_option_id=submitted.selected_option_id if submitted else None,
                text_answer=submitted.text_answer if submitted else None,
                grade=ScoringService.grade_answer(question, submitted),
            ))

        return sheet

    @staticmethod
    def total_possible_score(questions):
        """Sum of question points (equals the question count at 1 point each)"""
        return float(sum(q.points if q.points is not None else 1 for q in questions))
