import pytest

from exam_portal.errors import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError
)
from exam_portal.extensions import db
from exam_portal.models import Answer, QuestionType, Submission, SubmissionStatus
from exam_portal.services import AttemptService, GradingService
from exam_portal.services.scoring_service import Correct, Incorrect, Ungraded
from exam_portal.utils import Actor

from conftest import correct_option_id, make_teacher


@pytest.fixture
def submitted(exam, started):
    """Scenario A: both MCQs right, short answer awaiting a grade"""
    submission, student = started
    q1, q2, q3 = exam.questions
    AttemptService.submit_answers(student, submission.id, {"answers": [
        {"questionId": q1.id, "selectedOptionId": correct_option_id(q1)},
        {"questionId": q2.id, "selectedOptionId": correct_option_id(q2)},
        {"questionId": q3.id, "textAnswer": "Light becomes sugar"},
    ]})
    short = Answer.query.filter_by(submission_id=submission.id, question_id=q3.id).one()
    return submission, short


def _grade(actor, submission_id, answer_id, points):
    return GradingService.save_manual_grades(
        actor, submission_id, {"grades": [{"answerId": answer_id, "pointsAwarded": points}]}
    )


class TestReconcile:

    def test_all_resolved_is_graded(self):
        outcome = GradingService.reconcile([Correct(1.0), Incorrect(), Correct(0.5)])
        assert outcome.score == 1.5
        assert outcome.is_fully_graded is True
        assert outcome.status == SubmissionStatus.GRADED

    def test_pending_answer_keeps_submitted(self):
        outcome = GradingService.reconcile([Correct(1.0), Ungraded()])
        assert outcome.score == 1
        assert outcome.is_fully_graded is False
        assert outcome.status == SubmissionStatus.SUBMITTED

    def test_no_answers_is_graded_with_zero(self):
        outcome = GradingService.reconcile([])
        assert outcome.score == 0
        assert outcome.status == SubmissionStatus.GRADED

    def test_same_grades_same_outcome(self):
        grades = [Correct(1.0), Ungraded(), Incorrect()]
        assert GradingService.reconcile(grades) == GradingService.reconcile(list(reversed(grades)))


def test_scenario_b_grading_completes_submission(submitted, teacher_actor):
    submission, short = submitted
    graded = _grade(teacher_actor, submission.id, short.id, 1)

    assert graded.score == 3
    assert graded.score == graded.exam.total_possible_score()
    assert graded.is_fully_graded is True
    assert graded.status == SubmissionStatus.GRADED

    short = db.session.get(Answer, short.id)
    assert short.is_correct is True
    assert short.points_awarded == 1


def test_zero_points_is_incorrect_but_graded(submitted, teacher_actor):
    submission, short = submitted
    graded = _grade(teacher_actor, submission.id, short.id, 0)
    assert graded.score == 2
    assert graded.status == SubmissionStatus.GRADED
    assert db.session.get(Answer, short.id).is_correct is False


def test_regrading_converges(submitted, teacher_actor):
    submission, short = submitted
    _grade(teacher_actor, submission.id, short.id, 0)
    _grade(teacher_actor, submission.id, short.id, 0.5)
    again = _grade(teacher_actor, submission.id, short.id, 0.5)
    assert again.score == 2.5
    assert again.status == SubmissionStatus.GRADED


def test_clearing_a_grade_returns_to_submitted(submitted, teacher_actor):
    submission, short = submitted
    _grade(teacher_actor, submission.id, short.id, 1)
    cleared = _grade(teacher_actor, submission.id, short.id, None)

    assert cleared.score == 2
    assert cleared.is_fully_graded is False
    assert cleared.status == SubmissionStatus.SUBMITTED
    answer = db.session.get(Answer, short.id)
    assert answer.is_correct is None and answer.points_awarded is None


def test_objective_answer_cannot_be_graded_manually(submitted, teacher_actor):
    submission, _ = submitted
    mcq = next(
        a for a in Answer.query.filter_by(submission_id=submission.id)
        if a.question.type == QuestionType.MCQ
    )
    with pytest.raises(ValidationError):
        _grade(teacher_actor, submission.id, mcq.id, 0)
    assert db.session.get(Answer, mcq.id).points_awarded == 1


def test_points_above_question_value_rejected(submitted, teacher_actor):
    submission, short = submitted
    with pytest.raises(ValidationError) as exc:
        _grade(teacher_actor, submission.id, short.id, 5)
    assert exc.value.errors[f"answer {short.id}"] == ["Points cannot exceed the question value of 1.0."]
    assert db.session.get(Submission, submission.id).status == SubmissionStatus.SUBMITTED


def test_batch_rolls_back_when_any_answer_is_unknown(submitted, teacher_actor):
    submission, short = submitted
    with pytest.raises(NotFoundError):
        GradingService.save_manual_grades(teacher_actor, submission.id, {"grades": [
            {"answerId": short.id, "pointsAwarded": 1},
            {"answerId": 98765, "pointsAwarded": 1},
        ]})
    assert db.session.get(Answer, short.id).points_awarded is None
    assert db.session.get(Submission, submission.id).score == 2


def test_only_exam_owner_may_grade(submitted):
    submission, short = submitted
    other = make_teacher(username="mallory")
    with pytest.raises(AuthorizationError):
        _grade(Actor.teacher(other.id), submission.id, short.id, 1)
    with pytest.raises(AuthorizationError):
        _grade(Actor.student(submission.student_info_id), submission.id, short.id, 1)


def test_started_submission_cannot_be_graded(started, teacher_actor):
    submission, _ = started
    with pytest.raises(ConflictError):
        GradingService.save_manual_grades(
            teacher_actor, submission.id, {"grades": [{"answerId": 1, "pointsAwarded": 1}]}
        )


def test_missing_submission_is_not_found(teacher_actor):
    with pytest.raises(NotFoundError):
        _grade(teacher_actor, 4242, 1, 1)


@pytest.mark.parametrize("payload", [
    None,
    {},
    {"grades": []},
    {"grades": [{"answerId": 1}]},
    {"grades": [{"answerId": "1", "pointsAwarded": 1}]},
    {"grades": [{"answerId": 1, "pointsAwarded": -1}]},
    {"grades": [{"answerId": 1, "pointsAwarded": True}]},
    {"grades": [{"answerId": 1, "pointsAwarded": "1"}]},
    {"grades": [{"answerId": 1, "pointsAwarded": float("nan")}]},
    {"grades": [{"answerId": 1, "pointsAwarded": 1}, {"answerId": 1, "pointsAwarded": 0}]},
])
def test_bad_grade_payload_is_rejected(payload):
    with pytest.raises(ValidationError):
        GradingService.parse_grades_payload(payload)


def test_grade_payload_allows_null_to_clear():
    assert GradingService.parse_grades_payload(
        {"grades": [{"answerId": 7, "pointsAwarded": None}, {"answerId": 8, "pointsAwarded": 0.5}]}
    ) == {7: None, 8: 0.5}
