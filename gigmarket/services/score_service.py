"""
Score Service - Reputation Ledger

Each adjustment updates the user's score and appends a ScoreLog row in the
same transaction. The user row is version-checked, so concurrent awards and
penalties for the same student are serialized instead of overwriting each
other.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from gigmarket.core.exceptions import UserNotFoundError
from gigmarket.db.unit_of_work import unit_of_work
from gigmarket.models.score_log import ScoreLog
from gigmarket.models.user import User
from gigmarket.utils.constants import SCORE_EVENTS
from gigmarket.utils.helpers import to_uuid

logger = logging.getLogger(__name__)


class ScoreService:
    """Append-only reputation adjustments."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @unit_of_work
    def adjust_score(
        self,
        db: Session,
        user_id,
        delta: int,
        event: str,
        reason: Optional[str] = None,
        meta: Optional[Dict] = None,
    ) -> Dict:
        """
        Apply a score delta and record it.

        Returns:
            Dict with the new score and the ScoreLog row
        """
        user = db.execute(
            select(User).where(User.id == to_uuid(user_id)).with_for_update()
        ).scalar_one_or_none()
        if user is None:
            raise UserNotFoundError()

        user.score = (user.score or 0) + int(delta)

        log = ScoreLog(
            user_id=user.id,
            event=event,
            delta=int(delta),
            reason=reason,
            meta=meta or {},
        )
        db.add(log)
        db.flush()

        logger.info(f"🏅 Score {event} {int(delta):+d} for user {user.id} -> {user.score}")
        return {"user": user, "score": user.score, "log": log}

    def award_event(self, user_id, event: str, reason: Optional[str] = None, meta: Optional[Dict] = None, session: Session = None) -> Dict:
        """Adjust by the configured delta of a named SCORE_EVENTS entry."""
        if event not in SCORE_EVENTS:
            raise ValueError(f"Unknown score event: {event}")
        return self.adjust_score(user_id, SCORE_EVENTS[event], event.lower(), reason=reason, meta=meta, session=session)

    def award_best_effort(self, user_id, event: str, reason: Optional[str] = None, meta: Optional[Dict] = None) -> Optional[Dict]:
        """
        Award outside the caller's transaction; failures are logged only.

        Used for reputation side effects that must not undo the state change
        that triggered them.
        """
        try:
            return self.award_event(user_id, event, reason=reason, meta=meta)
        except Exception as e:
            logger.error(f"❌ Failed to apply {event} score for user {user_id}: {e}", exc_info=True)
            return None

    @unit_of_work
    def get_score_history(self, db: Session, user_id, limit: int = 100) -> List[ScoreLog]:
        return list(
            db.execute(
                select(ScoreLog)
                .where(ScoreLog.user_id == to_uuid(user_id))
                .order_by(ScoreLog.created_at.desc())
                .limit(limit)
            ).scalars()
        )

    @unit_of_work
    def get_score(self, db: Session, user_id) -> int:
        user = db.get(User, to_uuid(user_id))
        if user is None:
            raise UserNotFoundError()
        return user.score or 0
