import pytest

from exam_portal import create_app
from exam_portal.extensions import db
from exam_portal.models import Exam, Option, Question, QuestionType, Teacher
from exam_portal.services import AttemptService
from exam_portal.utils import Actor


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_teacher(username="alice", password="secret123"):
    teacher = Teacher(username=username)
    teacher.set_password(password)
    db.session.add(teacher)
    db.session.commit()
    return teacher


def make_exam(teacher, published=True, short_answer=True, duration_seconds=600):
    """Two MCQ questions (second option correct) plus an optional short answer"""
    questions = [
        Question(text="2 + 2 = ?", type=QuestionType.MCQ, order=0, options=[
            Option(text="3", is_correct=False),
            Option(text="4", is_correct=True),
        ]),
        Question(text="Capital of France?", type=QuestionType.MCQ, order=1, options=[
            Option(text="Berlin", is_correct=False),
            Option(text="Paris", is_correct=True),
        ]),
    ]
    if short_answer:
        questions.append(
            Question(text="Explain photosynthesis.", type=QuestionType.SHORT_ANSWER, order=2)
        )
    exam = Exam(
        teacher_id=teacher.id,
        title="General Knowledge",
        header="Term 1",
        instructions="Answer everything.",
        duration_seconds=duration_seconds,
        is_published=published,
        questions=questions,
    )
    db.session.add(exam)
    db.session.commit()
    return exam


def correct_option_id(question):
    return next(opt.id for opt in question.options if opt.is_correct)


def wrong_option_id(question):
    return next(opt.id for opt in question.options if not opt.is_correct)


@pytest.fixture
def teacher(app):
    return make_teacher()


@pytest.fixture
def teacher_actor(teacher):
    return Actor.teacher(teacher.id)


@pytest.fixture
def exam(teacher):
    return make_exam(teacher)


@pytest.fixture
def started(exam):
    """A STARTED submission and the student actor who owns it"""
    submission = AttemptService.start_attempt(exam.id, "Sam", "B", "10")
    return submission, Actor.student(submission.student_info_id)
