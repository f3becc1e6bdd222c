"""Job model."""

from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from gigmarket.config import settings
from gigmarket.db.base import Base, JSONType
from gigmarket.utils.constants import JOB_STATUS_OPEN, JOB_TYPE_OFFLINE


class Job(Base):
    """Job posting with its lifecycle, escrow and shortlist state."""

    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint("positions_required >= 1", name="ck_job_positions_required"),
        CheckConstraint("escrow_amount >= 0", name="ck_job_escrow_non_negative"),
    )

    title = Column(String(500), nullable=False, index=True)
    description = Column(Text)
    category = Column(String(100))
    budget = Column(Numeric(12, 2), nullable=False)
    duration = Column(String(50))  # free text, e.g. "7" or "7 days"
    skills_required = Column(JSONType, default=list)  # ["python", "figma", ...]

    employer_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    job_type = Column(String(20), nullable=False, default=JOB_TYPE_OFFLINE, index=True)  # offline, online
    location = Column(JSONType, default=dict)  # {"address": ..., "city": ..., "lat": ..., "lng": ...}

    # Staffing
    positions_required = Column(Integer, nullable=False, default=1)
    accepted_count = Column(Integer, nullable=False, default=0)
    assigned_student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)  # legacy single assignee
    assigned_students = Column(JSONType, default=list)  # ordered, de-duplicated student ids (str)

    # Lifecycle
    status = Column(String(20), nullable=False, default=JOB_STATUS_OPEN, index=True)
    closed_at = Column(DateTime)
    paid_at = Column(DateTime)
    cancelled_at = Column(DateTime)
    cancellation_reason = Column(String(500))

    # Escrow
    escrow_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    payment_released = Column(Boolean, nullable=False, default=False)

    # Approval gates (reset on every new assignment)
    student_accepted = Column(Boolean, nullable=False, default=False)
    student_approved = Column(Boolean, nullable=False, default=False)
    employer_approved = Column(Boolean, nullable=False, default=False)

    # Submission
    submission_requires_files = Column(Boolean, nullable=False, default=False)
    submission = Column(JSONType, nullable=True)  # {"description", "attachments", "submitted_at", "submitted_by"}

    # Shortlisting (online jobs)
    shortlist_multiplier = Column(Integer, nullable=False, default=settings.DEFAULT_SHORTLIST_MULTIPLIER)
    shortlist_window_hours = Column(Integer, nullable=False, default=settings.DEFAULT_SHORTLIST_WINDOW_HOURS)
    shortlist_window_ends_at = Column(DateTime, nullable=True, index=True)
    shortlist_computed = Column(Boolean, nullable=False, default=False, index=True)
    shortlisted_at = Column(DateTime)

    version_id = Column(Integer, nullable=False, default=1)

    # Relationships
    employer = relationship("User", foreign_keys=[employer_id])
    assigned_student = relationship("User", foreign_keys=[assigned_student_id])
    applications = relationship(
        "JobApplication",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="JobApplication.created_at",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_online(self) -> bool:
        return self.job_type != JOB_TYPE_OFFLINE

    @property
    def assigned_student_ids(self) -> list:
        return list(self.assigned_students or [])

    def find_application(self, application_id):
        for application in self.applications:
            if str(application.id) == str(application_id):
                return application
        return None

    def find_application_by_student(self, student_id):
        for application in self.applications:
            if str(application.student_id) == str(student_id):
                return application
        return None

    def __repr__(self):
        return f"<Job {self.title} ({self.job_type}, {self.status})>"
