"""
Review Service - Ratings Between Employers and Students

Once a job is completed (or paid) its employer can rate each assigned
student and each assigned student can rate the employer, once per
counterpart. The reviewee may answer a review once; the reviewer may edit it
within REVIEW_EDIT_WINDOW_HOURS.
"""

import logging
from datetime import timedelta
from typing import Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from gigmarket.config import settings
from gigmarket.core.exceptions import (
    ConflictError,
    DuplicateReviewError,
    ForbiddenError,
    InvalidRequestError,
    InvalidTransitionError,
    JobNotFoundError,
    ReviewNotFoundError,
    ReviewWindowClosedError,
)
from gigmarket.core.security import Principal
from gigmarket.db.unit_of_work import unit_of_work
from gigmarket.models.job import Job
from gigmarket.models.review import Review
from gigmarket.services.notification_service import enqueue_notification
from gigmarket.utils.constants import (
    JOB_STATUS_COMPLETED,
    JOB_STATUS_PAID,
    NOTIFICATION_TYPES,
    REVIEW_ASPECTS,
    REVIEW_EDIT_WINDOW_HOURS,
    ROLE_EMPLOYER,
    ROLE_STUDENT,
)
from gigmarket.utils.helpers import paginate, to_uuid, utc_now

logger = logging.getLogger(__name__)

REVIEWABLE_STATUSES = [JOB_STATUS_COMPLETED, JOB_STATUS_PAID]


def _average(values: List[int]) -> float:
    return round(sum(values) / len(values), 1) if values else 0


def summarize(reviews: List[Review]) -> Dict:
    """Average rating, per-aspect averages and rating distribution."""
    ratings = [r.rating for r in reviews]
    distribution: Dict[int, int] = {}
    for rating in ratings:
        distribution[rating] = distribution.get(rating, 0) + 1

    aspects = {}
    for aspect in REVIEW_ASPECTS:
        values = [(r.aspect_ratings or {}).get(aspect) for r in reviews]
        aspects[aspect] = _average([v for v in values if isinstance(v, int)])

    return {
        "average_rating": _average(ratings),
        "total_reviews": len(ratings),
        "average_aspect_ratings": aspects,
        "distribution": distribution,
    }


class ReviewService:
    """Create, list and answer reviews."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def _counterparts(job: Job, user_id: str) -> Optional[List[str]]:
        """Who `user_id` may review on this job, None when they took no part in it."""
        if str(job.employer_id) == user_id:
            return job.assigned_student_ids
        if user_id in job.assigned_student_ids:
            return [str(job.employer_id)]
        return None

    @staticmethod
    def _get_review(db: Session, review_id) -> Review:
        review = db.execute(
            select(Review).where(Review.id == to_uuid(review_id)).with_for_update()
        ).scalar_one_or_none()
        if review is None:
            raise ReviewNotFoundError()
        return review

    @unit_of_work
    def create_review(self, db: Session, principal: Principal, data: Dict) -> Review:
        """
        Rate the other party of a finished job.

        Args:
            principal: Reviewer
            data: job_id, rating, optional comment, aspect_ratings and
                reviewee_id (required for an employer with several assigned students)

        Raises:
            InvalidTransitionError: job not completed or paid
            ForbiddenError: caller did not take part in the job
            DuplicateReviewError: counterpart already reviewed on this job
        """
        job = db.get(Job, to_uuid(data.get("job_id")))
        if job is None:
            raise JobNotFoundError()
        if job.status not in REVIEWABLE_STATUSES:
            raise InvalidTransitionError("Can only review completed jobs")

        reviewer_id = str(principal.id)
        counterparts = self._counterparts(job, reviewer_id)
        if not counterparts:
            raise ForbiddenError("You are not authorized to review this job")

        reviewee_id = data.get("reviewee_id")
        if reviewee_id is None:
            if len(counterparts) > 1:
                raise InvalidRequestError("reviewee_id is required when several students worked on the job")
            reviewee_id = counterparts[0]
        reviewee_id = str(reviewee_id)
        if reviewee_id not in counterparts:
            raise ForbiddenError("You can only review the other party of this job")

        existing = db.execute(
            select(Review.id).where(
                Review.job_id == job.id,
                Review.reviewer_id == to_uuid(reviewer_id),
                Review.reviewee_id == to_uuid(reviewee_id),
            )
        ).first()
        if existing is not None:
            raise DuplicateReviewError()

        review = Review(
            job_id=job.id,
            reviewer_id=to_uuid(reviewer_id),
            reviewee_id=to_uuid(reviewee_id),
            reviewer_role=ROLE_EMPLOYER if str(job.employer_id) == reviewer_id else ROLE_STUDENT,
            rating=int(data["rating"]),
            comment=data.get("comment") or None,
            aspect_ratings=dict(data.get("aspect_ratings") or {}),
            is_public=True,
        )
        db.add(review)
        try:
            db.flush()
        except IntegrityError as e:
            raise DuplicateReviewError() from e

        enqueue_notification(
            db,
            NOTIFICATION_TYPES["REVIEW_RECEIVED"],
            review.reviewee_id,
            job=job,
            sender_id=review.reviewer_id,
            payload={"rating": review.rating, "review_id": str(review.id)},
        )
        logger.info(f"⭐ Review {review.id} ({review.rating}) on job {job.id}")
        return review

    @unit_of_work
    def get_user_reviews(
        self, db: Session, user_id, rating: Optional[int] = None, page: int = 1, limit: int = None
    ) -> Dict:
        """Public reviews received by a user, newest first, with rating stats."""
        user_id = to_uuid(user_id)
        offset, limit = paginate(page, limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)

        filters = [Review.reviewee_id == user_id, Review.is_public.is_(True)]
        if rating is not None:
            filters.append(Review.rating == rating)

        total = db.execute(select(func.count(Review.id)).where(*filters)).scalar_one()
        reviews = db.execute(
            select(Review).where(*filters).order_by(Review.created_at.desc()).offset(offset).limit(limit)
        ).scalars().all()

        return {
            "reviews": list(reviews),
            "stats": self.get_stats(user_id, session=db),
            "total": total,
            "page": offset // limit + 1,
            "limit": limit,
            "pages": (total + limit - 1) // limit,
        }

    @unit_of_work
    def get_stats(self, db: Session, user_id) -> Dict:
        reviews = db.execute(
            select(Review).where(Review.reviewee_id == to_uuid(user_id), Review.is_public.is_(True))
        ).scalars().all()
        return summarize(reviews)

    @unit_of_work
    def get_my_reviews(self, db: Session, principal: Principal, kind: str = "received") -> List[Review]:
        if kind not in ("given", "received"):
            raise InvalidRequestError("Invalid type. Use 'given' or 'received'")
        column = Review.reviewer_id if kind == "given" else Review.reviewee_id
        return list(
            db.execute(
                select(Review).where(column == to_uuid(principal.id)).order_by(Review.created_at.desc())
            ).scalars()
        )

    @unit_of_work
    def get_pending_reviews(self, db: Session, principal: Principal) -> List[Dict]:
        """Finished jobs where the caller still owes a counterpart a review."""
        user_id = str(principal.id)
        jobs = db.execute(
            select(Job)
            .where(
                Job.status.in_(REVIEWABLE_STATUSES),
                # assigned_students is a JSON list; membership is checked below
                or_(Job.employer_id == to_uuid(user_id), Job.assigned_student_id.isnot(None)),
            )
            .order_by(Job.updated_at.desc())
        ).scalars().all()

        given = {
            (str(job_id), str(reviewee_id))
            for job_id, reviewee_id in db.execute(
                select(Review.job_id, Review.reviewee_id).where(Review.reviewer_id == to_uuid(user_id))
            )
        }

        pending = []
        for job in jobs:
            counterparts = self._counterparts(job, user_id) or []
            owed = [c for c in counterparts if (str(job.id), c) not in given]
            if owed:
                pending.append({"job": job, "reviewee_ids": owed})
        return pending

    @unit_of_work
    def respond_to_review(self, db: Session, principal: Principal, review_id, comment: str) -> Review:
        review = self._get_review(db, review_id)
        if str(review.reviewee_id) != str(principal.id):
            raise ForbiddenError("You can only respond to reviews about you")
        if review.response_comment:
            raise ConflictError("You have already responded to this review")

        review.response_comment = comment
        review.responded_at = utc_now()
        return review

    @unit_of_work
    def update_review(self, db: Session, principal: Principal, review_id, data: Dict, now=None) -> Review:
        review = self._get_review(db, review_id)
        if str(review.reviewer_id) != str(principal.id):
            raise ForbiddenError("You can only edit your own reviews")

        now = now or utc_now()
        if now - review.created_at > timedelta(hours=REVIEW_EDIT_WINDOW_HOURS):
            raise ReviewWindowClosedError()

        if data.get("rating") is not None:
            review.rating = int(data["rating"])
        if "comment" in data:
            review.comment = data["comment"] or None
        if data.get("aspect_ratings") is not None:
            review.aspect_ratings = dict(data["aspect_ratings"])
        review.is_edited = True
        review.edited_at = now
        return review
