"""Job application model."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from gigmarket.db.base import Base, JSONType
from gigmarket.utils.constants import APPLICATION_STATUS_APPLIED


class JobApplication(Base):
    """Application owned by a Job; only reachable through its parent job."""

    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_id", "student_id", name="unique_job_student_application"),
    )

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    cover_letter = Column(String(2000))
    proposed_budget = Column(Numeric(12, 2))
    profile_url = Column(String(1000))  # online jobs only

    # Ranking
    evaluation_score = Column(Integer, nullable=False, default=0)  # 0 - 100
    evaluation_details = Column(JSONType, default=dict)
    shortlisted = Column(Boolean, nullable=False, default=False)

    status = Column(String(20), nullable=False, default=APPLICATION_STATUS_APPLIED)  # applied, accepted, rejected

    # Remote profile inspection
    inspection_status = Column(String(20), nullable=True, index=True)  # queued, inspecting, done, failed
    inspection_result = Column(JSONType, nullable=True)
    inspection_error = Column(Text)
    inspected_at = Column(DateTime)
    inspection_attempts = Column(Integer, nullable=False, default=0)

    # Relationships
    job = relationship("Job", back_populates="applications")
    student = relationship("User")

    def inspection_dict(self) -> dict:
        return {
            "status": self.inspection_status,
            "result": self.inspection_result,
            "error": self.inspection_error,
            "inspected_at": self.inspected_at.isoformat() if self.inspected_at else None,
        }

    def __repr__(self):
        return f"<JobApplication {self.student_id} -> {self.job_id} ({self.status})>"
