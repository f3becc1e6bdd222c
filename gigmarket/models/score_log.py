"""Score log model."""

from sqlalchemy import Column, ForeignKey, Integer, String, Uuid

from gigmarket.db.base import Base, JSONType


class ScoreLog(Base):
    """Append-only reputation adjustment; never updated or deleted."""

    __tablename__ = "score_logs"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    event = Column(String(50), nullable=False, index=True)  # JOB_COMPLETED, ON_TIME_SUBMISSION, ...
    delta = Column(Integer, nullable=False)
    reason = Column(String(500))
    meta = Column(JSONType, default=dict)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "event": self.event,
            "delta": self.delta,
            "reason": self.reason,
            "meta": self.meta or {},
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<ScoreLog {self.user_id} {self.event} {self.delta:+d}>"
