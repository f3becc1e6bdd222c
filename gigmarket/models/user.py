"""User model."""

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from gigmarket.db.base import Base, JSONType
from gigmarket.utils.constants import INITIAL_OTHER_SCORE, INITIAL_STUDENT_SCORE, ROLE_STUDENT


def initial_score(context) -> int:
    """Students start with the NEW_STUDENT reputation, everyone else at 0."""
    role = context.get_current_parameters().get("role")
    return INITIAL_STUDENT_SCORE if role == ROLE_STUDENT else INITIAL_OTHER_SCORE


def initial_score_for_role(role: str) -> int:
    return INITIAL_STUDENT_SCORE if role == ROLE_STUDENT else INITIAL_OTHER_SCORE


class User(Base):
    """Marketplace user (student, employer or admin)."""

    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(150), nullable=True)
    role = Column(String(20), nullable=False, default=ROLE_STUDENT, index=True)
    phone = Column(String(20), nullable=True)
    is_phone_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Reputation (see ScoreLog for the audit trail)
    score = Column(Integer, nullable=True, default=initial_score)

    # Role-shaped profile document, validated by services.profile_validation
    profile = Column(JSONType, default=dict)

    version_id = Column(Integer, nullable=False, default=1)

    # Relationships
    wallet = relationship("Wallet", back_populates="user", uselist=False)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
