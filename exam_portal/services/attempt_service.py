"""
Attempt Service
Owns a student's exam attempt: start, exam paper, submit, result
"""
import logging
from datetime import timedelta

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from exam_portal.errors import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError
)
from exam_portal.extensions import db, atomic
from exam_portal.models import Answer, Exam, StudentInfo, Submission, SubmissionStatus
from exam_portal.services.grading_service import GradingService
from exam_portal.services.scoring_service import ScoringService
from exam_portal.utils.helpers import now_utc, as_utc

logger = logging.getLogger(__name__)


def _clean(value):
    return value.strip() if isinstance(value, str) else value


class AttemptService:
    """Attempt lifecycle: STARTED -> SUBMITTED -> GRADED"""

    @staticmethod
    def parse_start_payload(payload):
        """Validate ``{name, section, grade, examId}``"""
        if not isinstance(payload, dict):
            raise ValidationError('All fields are required.')

        errors = {}
        fields = {}
        for key, label in (('name', 'Name'), ('section', 'Section'), ('grade', 'Grade')):
            value = _clean(payload.get(key))
            if isinstance(value, int) and not isinstance(value, bool):
                value = str(value)
            if not isinstance(value, str) or not value:
                errors[key] = [f'{label} required']
            else:
                fields[key] = value

        exam_id = payload.get('examId')
        if not isinstance(exam_id, int) or isinstance(exam_id, bool):
            errors['examId'] = ['Exam ID required']

        if errors:
            raise ValidationError('All fields are required.', errors=errors)
        return exam_id, fields

    @staticmethod
    def find_or_create_student(name, section, grade):
        student = StudentInfo.query.filter_by(name=name, section=section, grade=grade).first()
        if student is None:
            student = StudentInfo(name=name, section=section, grade=grade)
            db.session.add(student)
            try:
                db.session.flush()
            except IntegrityError as exc:
                # a concurrent first start for the same identity won the insert
                raise ConflictError('You have already started this exam.') from exc
        return student

    @staticmethod
    def start_attempt(exam_id, name, section, grade):
        """
        Begin an exam for a student

        Raises:
            NotFoundError: exam missing or not published
            ConflictError: the student already has an attempt for this exam

        Returns:
            Submission: the new STARTED attempt
        """
        with atomic():
            exam = db.session.get(Exam, exam_id)
            if exam is None or not exam.is_published:
                raise NotFoundError('Exam not found.')

            student = AttemptService.find_or_create_student(name, section, grade)

            existing = Submission.query.filter_by(
                student_info_id=student.id, exam_id=exam.id
            ).first()
            if existing is not None:
                logger.warning(
                    'Duplicate attempt for exam %s by student %s (submission %s)',
                    exam.id, student.id, existing.id
                )
                raise ConflictError('You have already started this exam.')

            submission = Submission(
                student_info_id=student.id,
                exam_id=exam.id,
                status=SubmissionStatus.STARTED,
                score=None,
                is_fully_graded=False,
                started_at=now_utc(),
            )
            db.session.add(submission)
            try:
                db.session.flush()
            except IntegrityError as exc:
                raise ConflictError('You have already started this exam.') from exc

        logger.info('Started submission %s for exam %s', submission.id, exam_id)
        return submission

    @staticmethod
    def _load_owned(actor, submission_id):
        submission = db.session.get(Submission, submission_id)
        if submission is None:
            raise NotFoundError('Exam session not found.')
        if actor is None or not actor.is_student or submission.student_info_id != actor.id:
            raise AuthorizationError('This exam session belongs to another student.')
        return submission

    @staticmethod
    def get_exam_paper(actor, submission_id):
        """
        Questions for an in-progress attempt, without correctness flags

        Returns:
            dict: submission id, exam info, student name and questions
        """
        submission = AttemptService._load_owned(actor, submission_id)
        if submission.status != SubmissionStatus.STARTED:
            raise ConflictError('This exam has already been submitted.')

        exam = submission.exam
        started_at = as_utc(submission.started_at)
        deadline = None
        if exam.duration_seconds and started_at:
            deadline = started_at + timedelta(seconds=exam.duration_seconds)

        return {
            'submissionId': submission.id,
            'examId': exam.id,
            'examTitle': exam.title,
            'examHeader': exam.header,
            'instructions': exam.instructions,
            'durationSeconds': exam.duration_seconds,
            'startedAt': started_at.isoformat() if started_at else None,
            'deadline': deadline.isoformat() if deadline else None,
            'studentName': submission.student.name if submission.student else 'Student',
            'questions': [q.to_dict(include_answers=False) for q in exam.questions],
        }

    @staticmethod
    def submit_answers(actor, submission_id, payload):
        """
        Grade and record the student's answers, exactly once

        Replacing the answers and updating the submission happen in one
        transaction. The status moves away from STARTED with a
        compare-and-swap so a concurrent second submit loses.

        Returns:
            dict: score and totalPossibleScore
        """
        max_length = current_app.config.get('MAX_TEXT_ANSWER_LENGTH', 2000)
        submitted = ScoringService.parse_answer_payload(payload, max_text_length=max_length)

        with atomic():
            submission = AttemptService._load_owned(actor, submission_id)
            if submission.status != SubmissionStatus.STARTED:
                logger.warning('Submission %s already processed', submission_id)
                raise ConflictError('This exam has already been submitted or graded.')

            exam = submission.exam
            sheet = ScoringService.score_answers(exam.questions, submitted)
            if sheet.ignored_question_ids:
                logger.warning(
                    'Ignoring answers for questions %s not in exam %s',
                    sheet.ignored_question_ids, exam.id
                )

            submitted_at = now_utc()
            claimed = db.session.execute(
                update(Submission)
                .where(Submission.id == submission.id)
                .where(Submission.status == SubmissionStatus.STARTED)
                .values(status=SubmissionStatus.SUBMITTED, submitted_at=submitted_at)
                .execution_options(synchronize_session=False)
            )
            if claimed.rowcount != 1:
                raise ConflictError('This exam has already been submitted or graded.')

            Answer.query.filter_by(submission_id=submission.id).delete(
                synchronize_session=False
            )
            for scored in sheet.answers:
                db.session.add(Answer(
                    submission_id=submission.id,
                    question_id=scored.question_id,
                    selected_option_id=scored.selected_option_id,
                    text_answer=scored.text_answer,
                    is_correct=scored.is_correct,
                    points_awarded=scored.points_awarded,
                ))

            outcome = GradingService.reconcile(sheet.grades)
            submission.submitted_at = submitted_at
            outcome.apply_to(submission)

            started_at = as_utc(submission.started_at)
            if exam.duration_seconds and started_at:
                deadline = started_at + timedelta(seconds=exam.duration_seconds)
                if submitted_at > deadline:
                    logger.warning(
                        'Late submission %s: %ss past the deadline',
                        submission.id, int((submitted_at - deadline).total_seconds())
                    )

        logger.info(
            'Submission %s submitted: score=%s/%s status=%s',
            submission_id, outcome.score, sheet.total_possible_score, outcome.status
        )
        return {
            'submissionId': submission_id,
            'score': outcome.score,
            'totalPossibleScore': sheet.total_possible_score,
            'isFullyGraded': outcome.is_fully_graded,
            'status': outcome.status,
        }

    @staticmethod
    def get_result(actor, submission_id):
        """
        Result of a submitted attempt with per-question detail

        Visible to the student who owns it and the teacher who owns the exam.
        """
        submission = db.session.get(Submission, submission_id)
        if submission is None:
            raise NotFoundError('Submission results not found.')

        exam = submission.exam
        if actor is None:
            raise AuthorizationError()
        if actor.is_student and submission.student_info_id != actor.id:
            raise AuthorizationError('This submission belongs to another student.')
        if actor.is_teacher and exam.teacher_id != actor.id:
            raise AuthorizationError('You are not authorized to view this submission.')

        if submission.status == SubmissionStatus.STARTED:
            raise ConflictError(
                'This exam has not been submitted yet. Please complete and submit the exam.'
            )

        answers = sorted(
            Answer.query.filter_by(submission_id=submission.id).all(),
            key=lambda a: (a.question.order if a.question else 0, a.question_id)
        )
        data = submission.to_summary_dict()
        data.update({
            'exam': {'id': exam.id, 'title': exam.title, 'header': exam.header},
            'totalPossibleScore': exam.total_possible_score(),
            'answers': [a.to_dict() for a in answers],
        })
        return data
