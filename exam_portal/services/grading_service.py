"""
Grading Service
Grade reconciliation and teacher-entered manual grades
"""
import logging
from dataclasses import dataclass

from exam_portal.errors import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError
)
from exam_portal.extensions import db, atomic
from exam_portal.models import Answer, Exam, QuestionType, Submission, SubmissionStatus
from exam_portal.services.scoring_service import Ungraded, grade_from_points, grade_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reconciliation:
    score: float
    is_fully_graded: bool
    status: str

    def apply_to(self, submission):
        submission.score = self.score
        submission.is_fully_graded = self.is_fully_graded
        submission.status = self.status

    def to_dict(self):
        return {
            'score': self.score,
            'isFullyGraded': self.is_fully_graded,
            'status': self.status,
        }


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _max_points(question):
    return question.points if question.points is not None else 1


class GradingService:
    """Recomputes submission aggregates and applies manual grades"""

    @staticmethod
    def reconcile(grades):
        """
        Recompute aggregates from the full current set of answer grades

        score is the sum of resolved points; the submission is fully graded
        when nothing is pending, and its status follows from that.
        """
        grades = list(grades)
        score = float(sum(g.points_awarded for g in grades if g.points_awarded is not None))
        is_fully_graded = not any(isinstance(g, Ungraded) for g in grades)
        status = SubmissionStatus.GRADED if is_fully_graded else SubmissionStatus.SUBMITTED
        return Reconciliation(score=score, is_fully_graded=is_fully_graded, status=status)

    @staticmethod
    def parse_grades_payload(payload):
        """
        Validate ``{"grades": [{answerId, pointsAwarded|null}, ...]}``

        Returns:
            dict: answer id -> points (None clears the grade), payload order kept
        """
        if not isinstance(payload, dict) or not isinstance(payload.get('grades'), list):
            raise ValidationError(
                'Validation Error: Invalid grade data provided.',
                errors={'grades': ['Expected a list of grade updates.']}
            )
        if not payload['grades']:
            raise ValidationError(
                'Validation Error: Invalid grade data provided.',
                errors={'grades': ['At least one grade update must be provided.']}
            )

        errors = {}
        updates = {}
        for index, entry in enumerate(payload['grades']):
            key = f'grades[{index}]'
            if not isinstance(entry, dict):
                errors[key] = ['Each grade must be an object.']
                continue

            problems = []
            answer_id = entry.get('answerId')
            if not isinstance(answer_id, int) or isinstance(answer_id, bool):
                problems.append('Each grade must have a valid answer ID.')
            elif answer_id in updates:
                problems.append(f'Duplicate grade for answer {answer_id}.')

            if 'pointsAwarded' not in entry:
                problems.append('pointsAwarded is required (use null to clear a grade).')
            else:
                points = entry['pointsAwarded']
                if points is not None:
                    if not _is_number(points) or points != points:
                        problems.append('Points awarded must be a number.')
                    elif points < 0:
                        problems.append('Points cannot be negative.')

            if problems:
                errors[key] = problems
                continue
            updates[answer_id] = entry['pointsAwarded']

        if errors:
            raise ValidationError('Validation Error: Invalid grade data provided.', errors=errors)
        return updates

    @staticmethod
    def save_manual_grades(actor, submission_id, payload):
        """
        Apply a batch of manual grades to short-answer answers, then
        reconcile the submission once over a fresh read of all its answers

        Returns:
            Submission: the updated submission
        """
        updates = GradingService.parse_grades_payload(payload)

        with atomic():
            submission = (
                Submission.query
                .filter_by(id=submission_id)
                .with_for_update()
                .first()
            )
            if submission is None:
                raise NotFoundError('Submission not found.')

            exam = db.session.get(Exam, submission.exam_id)
            if actor is None or not actor.is_teacher or exam.teacher_id != actor.id:
                logger.warning(
                    'Actor %s not authorized to grade submission %s', actor, submission_id
                )
                raise AuthorizationError('You are not authorized to grade this submission.')

            if submission.status == SubmissionStatus.STARTED:
                raise ConflictError('This exam has not been submitted yet.')

            answers = {
                a.id: a for a in Answer.query.filter_by(submission_id=submission.id).all()
            }

            errors = {}
            for answer_id, points in updates.items():
                answer = answers.get(answer_id)
                if answer is None:
                    raise NotFoundError(
                        f'Answer {answer_id} not found in submission {submission_id}.'
                    )
                question = answer.question
                if question is None or question.type != QuestionType.SHORT_ANSWER:
                    errors[f'answer {answer_id}'] = [
                        'Only short-answer responses can be graded manually.'
                    ]
                elif points is not None and points > _max_points(question):
                    errors[f'answer {answer_id}'] = [
                        f'Points cannot exceed the question value of {_max_points(question)}.'
                    ]
            if errors:
                raise ValidationError('Validation Error: Invalid grade data provided.', errors=errors)

            for answer_id, points in updates.items():
                grade = grade_from_points(points)
                answer = answers[answer_id]
                answer.points_awarded = grade.points_awarded
                answer.is_correct = grade.is_correct
            db.session.flush()

            fresh = Answer.query.filter_by(submission_id=submission.id).all()
            outcome = GradingService.reconcile(grade_of(a) for a in fresh)
            outcome.apply_to(submission)

        logger.info(
            'Graded %d answer(s) on submission %s: score=%s status=%s',
            len(updates), submission_id, outcome.score, outcome.status
        )
        return submission
