"""
Announcement and ScheduledExam Models
Teacher-published notices shown on the public portal
"""
from exam_portal.extensions import db
from exam_portal.utils.helpers import now_utc, isoformat, to_local_time


class Announcement(db.Model):
    """Announcement model"""
    __tablename__ = 'announcement'

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('teacher.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_published = db.Column(db.Boolean, default=True, nullable=False)

    # NULL means never expires
    expires_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    teacher = db.relationship('Teacher', lazy='joined')

    def __repr__(self):
        return f'<Announcement {self.title}>'

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'isPublished': self.is_published,
            'expiresAt': isoformat(self.expires_at),
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
            'teacher': {'username': self.teacher.username} if self.teacher else None,
        }


class ScheduledExam(db.Model):
    """Exam schedule entry model"""
    __tablename__ = 'scheduled_exam'

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('teacher.id'), nullable=False, index=True)
    exam_title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    exam_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    duration = db.Column(db.String(50))  # free text, e.g. "90 minutes"
    course = db.Column(db.String(100))
    location = db.Column(db.String(200))
    notes = db.Column(db.Text)
    is_published = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=now_utc)

    teacher = db.relationship('Teacher', lazy='joined')

    def __repr__(self):
        return f'<ScheduledExam {self.exam_title} @ {self.exam_date}>'

    def to_dict(self):
        local_date = to_local_time(self.exam_date)
        return {
            'id': self.id,
            'examTitle': self.exam_title,
            'description': self.description,
            'examDate': isoformat(self.exam_date),
            'examDateLocal': local_date.isoformat() if local_date else None,
            'duration': self.duration,
            'course': self.course,
            'location': self.location,
            'notes': self.notes,
            'isPublished': self.is_published,
            'createdAt': isoformat(self.created_at),
            'teacher': {'username': self.teacher.username} if self.teacher else None,
        }
