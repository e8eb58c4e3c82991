"""
Exam Service
Exam authoring: create, edit, publish, delete, replace questions
"""
import logging

from exam_portal.errors import ConflictError, NotFoundError, ValidationError
from exam_portal.extensions import db, atomic
from exam_portal.models import (
    Exam, Option, Question, QuestionType, Submission, SubmissionStatus
)

logger = logging.getLogger(__name__)

_MISSING = object()


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _optional_text(payload, key, errors):
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        errors[key] = [f'{key} must be a string.']
        return None
    return value.strip() or None


class ExamService:
    """Exam authoring for the owning teacher"""

    # ========================================
    # EXAM FIELDS
    # ========================================

    @staticmethod
    def parse_exam_fields(payload, partial=False):
        """
        Validate exam fields (title, header, instructions, durationSeconds, isPublished)

        With partial=True only the keys present are validated and returned.
        """
        if not isinstance(payload, dict):
            raise ValidationError('Invalid input')

        errors = {}
        fields = {}

        if 'title' in payload or not partial:
            title = payload.get('title')
            if not isinstance(title, str) or len(title.strip()) < 3:
                errors['title'] = ['Title must be at least 3 characters']
            else:
                fields['title'] = title.strip()

        for key in ('header', 'instructions'):
            if key in payload or not partial:
                fields[key] = _optional_text(payload, key, errors)

        if 'durationSeconds' in payload:
            duration = payload.get('durationSeconds')
            if duration is not None and (not _is_int(duration) or duration <= 0):
                errors['durationSeconds'] = ['Duration must be a positive number of seconds or null.']
            else:
                fields['duration_seconds'] = duration

        if 'isPublished' in payload:
            if not isinstance(payload['isPublished'], bool):
                errors['isPublished'] = ['isPublished must be a boolean.']
            else:
                fields['is_published'] = payload['isPublished']

        if errors:
            raise ValidationError('Invalid input', errors=errors)
        return fields

    @staticmethod
    def create_exam(actor, payload):
        fields = ExamService.parse_exam_fields(payload)
        with atomic():
            exam = Exam(teacher_id=actor.id, **fields)
            db.session.add(exam)
        logger.info('Teacher %s created exam %s', actor.id, exam.id)
        return exam

    @staticmethod
    def list_exams(actor):
        return (
            Exam.query
            .filter_by(teacher_id=actor.id)
            .order_by(Exam.created_at.desc(), Exam.id.desc())
            .all()
        )

    @staticmethod
    def get_owned_exam(actor, exam_id):
        """Exam owned by the actor; others' exams are reported as not found"""
        exam = Exam.query.filter_by(id=exam_id, teacher_id=actor.id).first()
        if exam is None:
            raise NotFoundError('Exam not found or not authorized')
        return exam

    @staticmethod
    def update_exam(actor, exam_id, payload):
        fields = ExamService.parse_exam_fields(payload, partial=True)
        with atomic():
            exam = ExamService.get_owned_exam(actor, exam_id)
            if fields.get('is_published') and not exam.questions:
                raise ValidationError(
                    'Cannot publish an exam without questions.',
                    errors={'isPublished': ['Add at least one question before publishing.']}
                )
            for key, value in fields.items():
                setattr(exam, key, value)
        logger.info('Teacher %s updated exam %s: %s', actor.id, exam_id, sorted(fields))
        return exam

    @staticmethod
    def delete_exam(actor, exam_id):
        """Delete an exam with its questions and all submissions"""
        with atomic():
            exam = ExamService.get_owned_exam(actor, exam_id)
            submission_count = Submission.query.filter_by(exam_id=exam.id).count()
            db.session.delete(exam)
        logger.info(
            'Teacher %s deleted exam %s (%d submissions removed)',
            actor.id, exam_id, submission_count
        )

    @staticmethod
    def list_submissions(actor, exam_id):
        """Submissions for an owned exam, most recent first"""
        exam = ExamService.get_owned_exam(actor, exam_id)
        submissions = (
            Submission.query
            .filter_by(exam_id=exam.id)
            .order_by(Submission.submitted_at.desc(), Submission.id.desc())
            .all()
        )
        return exam, submissions

    # ========================================
    # QUESTIONS
    # ========================================

    @staticmethod
    def parse_questions_payload(payload):
        """
        Validate ``{"questions": [{id?, text, type, order?, points?, options?}]}``

        Returns:
            list: normalized question dicts
        """
        if not isinstance(payload, dict) or not isinstance(payload.get('questions'), list):
            raise ValidationError(
                'Invalid input data',
                errors={'questions': ['Expected a list of questions.']}
            )

        errors = {}
        questions = []
        for index, entry in enumerate(payload['questions']):
            key = f'questions[{index}]'
            if not isinstance(entry, dict):
                errors[key] = ['Each question must be an object.']
                continue

            problems = []
            question_id = entry.get('id')
            if question_id is not None and not _is_int(question_id):
                problems.append('id must be an integer or null.')

            text = entry.get('text')
            if not isinstance(text, str) or not text.strip():
                problems.append('Question text cannot be empty')

            qtype = QuestionType.normalize(entry.get('type'))
            if qtype is None:
                problems.append(f'type must be one of {", ".join(QuestionType.ALL)}.')

            order = entry.get('order', index)
            if order is None:
                order = index
            if not _is_int(order):
                problems.append('order must be an integer.')

            points = entry.get('points', 1)
            if points is None:
                points = 1
            if isinstance(points, bool) or not isinstance(points, (int, float)) or points <= 0:
                problems.append('points must be a positive number.')

            raw_options = entry.get('options') or []
            options = []
            if not isinstance(raw_options, list):
                problems.append('options must be a list.')
                raw_options = []
            for opt_index, opt in enumerate(raw_options):
                if not isinstance(opt, dict):
                    problems.append(f'options[{opt_index}] must be an object.')
                    continue
                opt_id = opt.get('id')
                if opt_id is not None and not _is_int(opt_id):
                    problems.append(f'options[{opt_index}].id must be an integer or null.')
                opt_text = opt.get('text')
                if not isinstance(opt_text, str) or not opt_text.strip():
                    problems.append(f'options[{opt_index}]: Option text cannot be empty')
                if not isinstance(opt.get('isCorrect'), bool):
                    problems.append(f'options[{opt_index}].isCorrect must be a boolean.')
                options.append({
                    'id': opt_id,
                    'text': opt_text.strip() if isinstance(opt_text, str) else opt_text,
                    'is_correct': opt.get('isCorrect') is True,
                })

            if qtype in QuestionType.OBJECTIVE:
                if not options:
                    problems.append('Multiple-choice and true/false questions need at least one option.')
                elif sum(1 for opt in options if opt['is_correct']) != 1:
                    problems.append('Exactly one option must be marked correct.')
            elif qtype == QuestionType.SHORT_ANSWER and options:
                problems.append('Short-answer questions cannot have options.')

            if problems:
                errors[key] = problems
                continue

            questions.append({
                'id': question_id,
                'text': text.strip(),
                'type': qtype,
                'order': order,
                'points': float(points),
                'options': options,
            })

        if errors:
            raise ValidationError('Invalid input data', errors=errors)
        return questions

    @staticmethod
    def _reconcile_options(question, incoming):
        """Replace a question's options: delete missing ids, update known, create new"""
        existing = {opt.id: opt for opt in question.options}
        unknown = [o['id'] for o in incoming if o['id'] is not None and o['id'] not in existing]
        if unknown:
            raise ValidationError(
                'Invalid input data',
                errors={f'question {question.id}': [f'Unknown option ids: {unknown}']}
            )

        keep_ids = {o['id'] for o in incoming if o['id'] is not None}
        for opt_id, opt in existing.items():
            if opt_id not in keep_ids:
                question.options.remove(opt)

        for data in incoming:
            if data['id'] is not None:
                opt = existing[data['id']]
                opt.text = data['text']
                opt.is_correct = data['is_correct']
            else:
                question.options.append(Option(text=data['text'], is_correct=data['is_correct']))

    @staticmethod
    def _check_scored_questions_unchanged(exam, existing, incoming):
        """
        Once an attempt has been submitted its answers and score depend on
        the exam's questions, so those questions may not be deleted, retyped
        or re-weighted. Text, order, options and new questions stay editable.
        """
        submitted = (
            Submission.query
            .filter(Submission.exam_id == exam.id)
            .filter(Submission.status != SubmissionStatus.STARTED)
            .count()
        )
        if not submitted:
            return

        by_id = {q['id']: q for q in incoming if q['id'] is not None}
        errors = {}
        for qid, question in existing.items():
            data = by_id.get(qid)
            if data is None:
                errors[f'question {qid}'] = ['Cannot delete a question that has submitted answers.']
            elif data['type'] != question.type:
                errors[f'question {qid}'] = ['Cannot change the type of a question that has submitted answers.']
            elif data['points'] != question.points:
                errors[f'question {qid}'] = ['Cannot change the points of a question that has submitted answers.']

        if errors:
            logger.warning(
                'Rejected question edit on exam %s with %d submitted attempt(s): %s',
                exam.id, submitted, sorted(errors)
            )
            raise ConflictError(
                'This exam already has submissions; scored questions cannot be removed or re-scored.',
                errors=errors
            )

    @staticmethod
    def replace_questions(actor, exam_id, payload):
        """
        Replace an exam's question list wholesale in one transaction

        Existing questions whose ids are absent from the payload are deleted,
        listed ids are updated and entries without an id are created. The
        same set difference is applied to each question's options.

        Raises:
            ConflictError: the edit would delete, retype or re-weight a
                question that submitted attempts were scored against
        """
        incoming = ExamService.parse_questions_payload(payload)

        with atomic():
            exam = ExamService.get_owned_exam(actor, exam_id)
            existing = {q.id: q for q in exam.questions}

            unknown = [q['id'] for q in incoming if q['id'] is not None and q['id'] not in existing]
            duplicated = {
                q['id'] for q in incoming
                if q['id'] is not None and sum(1 for other in incoming if other['id'] == q['id']) > 1
            }
            if unknown or duplicated:
                errors = {}
                if unknown:
                    errors['unknown'] = [f'Questions {unknown} do not belong to this exam.']
                if duplicated:
                    errors['duplicates'] = [f'Questions {sorted(duplicated)} listed more than once.']
                raise ValidationError('Invalid input data', errors=errors)

            ExamService._check_scored_questions_unchanged(exam, existing, incoming)

            keep_ids = {q['id'] for q in incoming if q['id'] is not None}
            removed = [qid for qid in existing if qid not in keep_ids]
            for qid in removed:
                exam.questions.remove(existing[qid])

            created = 0
            for data in incoming:
                if data['id'] is not None:
                    question = existing[data['id']]
                    question.text = data['text']
                    question.type = data['type']
                    question.order = data['order']
                    question.points = data['points']
                else:
                    question = Question(
                        text=data['text'], type=data['type'],
                        order=data['order'], points=data['points']
                    )
                    exam.questions.append(question)
                    created += 1
                ExamService._reconcile_options(question, data['options'])

            if exam.is_published and not incoming:
                exam.is_published = False

        logger.info(
            'Exam %s questions replaced: %d created, %d updated, %d deleted',
            exam_id, created, len(keep_ids), len(removed)
        )
        db.session.refresh(exam)
        return exam
