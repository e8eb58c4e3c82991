# seed_db.py
"""Create tables and seed demo teachers, notices and a sample exam."""
import os
import sys
from datetime import timedelta

from exam_portal import create_app
from exam_portal.extensions import atomic
from exam_portal.models import (
    Announcement, Exam, Option, Question, QuestionType, ScheduledExam, Teacher
)
from exam_portal.utils import now_utc

DEMO_TEACHERS = [
    ('AliceW', os.getenv('SEED_ALICE_PASSWORD', 'passwordAlice123')),
    ('BobTBuilder', os.getenv('SEED_BOB_PASSWORD', 'passwordBob456')),
]


def upsert_teacher(session, username, password):
    teacher = Teacher.query.filter_by(username=username).first()
    if teacher is None:
        teacher = Teacher(username=username)
        session.add(teacher)
    teacher.set_password(password)
    session.flush()
    return teacher


def seed_database(config_name=None):
    """Seed demo data; teachers are upserted, other rows only created once"""
    app = create_app(config_name)

    with app.app_context():
        print(f"\n{'='*50}")
        print("DATABASE SEED")
        print(f"{'='*50}")

        with atomic() as session:
            teachers = [upsert_teacher(session, name, pw) for name, pw in DEMO_TEACHERS]
            for teacher in teachers:
                print(f"  ✅ Teacher {teacher.username} (ID: {teacher.id})")
            alice, bob = teachers

            if Announcement.query.count() == 0:
                session.add_all([
                    Announcement(
                        teacher_id=alice.id,
                        title='Welcome New Intake!',
                        content='A warm welcome to all new students. Orientation is on Monday at 9 AM.',
                    ),
                    Announcement(
                        teacher_id=bob.id,
                        title='Midterm Exam Schedule Update',
                        content="The midterm schedule has been updated. Check the 'Exam Schedules' tab.",
                        expires_at=now_utc() + timedelta(days=30),
                    ),
                ])
                print("  ✅ Announcements")

            if ScheduledExam.query.count() == 0:
                session.add(ScheduledExam(
                    teacher_id=alice.id,
                    exam_title='Mathematics 101 - Midterm',
                    description='Covers chapters 1-5. Calculators allowed.',
                    exam_date=now_utc() + timedelta(days=14),
                    duration='90 minutes',
                    course='MATH101',
                    location='Room 301, Main Building',
                    notes='Please bring your student ID.',
                ))
                print("  ✅ Scheduled exam")

            if Exam.query.filter_by(teacher_id=alice.id).count() == 0:
                exam = Exam(
                    teacher_id=alice.id,
                    title='Basic Algebra Quiz',
                    header='Algebra - Section A',
                    instructions='Answer every question. Short answers are graded by your teacher.',
                    duration_seconds=30 * 60,
                    is_published=True,
                )
                exam.questions = [
                    Question(text='2 + 2 = ?', type=QuestionType.MCQ, order=0, options=[
                        Option(text='3', is_correct=False),
                        Option(text='4', is_correct=True),
                        Option(text='5', is_correct=False),
                    ]),
                    Question(text='x * 0 = 0 for every x.', type=QuestionType.TRUE_FALSE, order=1, options=[
                        Option(text='True', is_correct=True),
                        Option(text='False', is_correct=False),
                    ]),
                    Question(text='Explain what a variable is.', type=QuestionType.SHORT_ANSWER, order=2),
                ]
                session.add(exam)
                print("  ✅ Sample exam")

        print(f"\n{'='*50}")
        print("✅ SEED COMPLETED SUCCESSFULLY!")
        print(f"{'='*50}")


if __name__ == '__main__':
    seed_database(sys.argv[1] if len(sys.argv) > 1 else None)
