"""Review model."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from gigmarket.db.base import Base, JSONType


class Review(Base):
    """Rating left by one party of a finished job about the other."""

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("job_id", "reviewer_id", "reviewee_id", name="unique_job_reviewer_reviewee"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
    )

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False, index=True)
    reviewer_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    reviewee_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    reviewer_role = Column(String(20), nullable=False)  # student, employer

    rating = Column(Integer, nullable=False)
    comment = Column(String(500))
    aspect_ratings = Column(JSONType, default=dict)  # communication, quality, timeliness, professionalism
    is_public = Column(Boolean, nullable=False, default=True)

    response_comment = Column(String(300))
    responded_at = Column(DateTime)

    is_edited = Column(Boolean, nullable=False, default=False)
    edited_at = Column(DateTime)

    job = relationship("Job")
    reviewer = relationship("User", foreign_keys=[reviewer_id])
    reviewee = relationship("User", foreign_keys=[reviewee_id])

    def __repr__(self):
        return f"<Review {self.reviewer_id} -> {self.reviewee_id} ({self.rating})>"
