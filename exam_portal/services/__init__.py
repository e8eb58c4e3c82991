"""
Services Package
"""
from exam_portal.services.scoring_service import ScoringService
from exam_portal.services.grading_service import GradingService
from exam_portal.services.attempt_service import AttemptService
from exam_portal.services.exam_service import ExamService
from exam_portal.services.notice_service import AnnouncementService, ScheduleService

__all__ = [
    'ScoringService', 'GradingService', 'AttemptService',
    'ExamService', 'AnnouncementService', 'ScheduleService'
]
