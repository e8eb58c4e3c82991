"""
Models Package
Exports all database models
"""
from exam_portal.models.teacher import Teacher
from exam_portal.models.student import StudentInfo
from exam_portal.models.exam import Exam
from exam_portal.models.question import Question, Option, QuestionType
from exam_portal.models.submission import Submission, Answer, SubmissionStatus
from exam_portal.models.notice import Announcement, ScheduledExam

__all__ = [
    'Teacher', 'StudentInfo', 'Exam', 'Question', 'Option', 'QuestionType',
    'Submission', 'Answer', 'SubmissionStatus', 'Announcement', 'ScheduledExam'
]
