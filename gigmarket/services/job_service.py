"""
Job Service - Job Lifecycle State Machine

States: open -> in_progress -> (completed -> paid) | closed | cancelled

`closed` means "no longer staffing" (positions filled or application cap
reached); accepted students can still be working on a closed job.

Every mutation runs in a single unit of work on a row-locked, versioned
Job. Notifications are appended to the outbox inside the same transaction.
Reputation awards that must not undo the triggering transition run after
commit and are best-effort.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, sessionmaker

from gigmarket.config import settings
from gigmarket.core.exceptions import (
    ApplicationNotFoundError,
    ApplicationsClosedError,
    ForbiddenError,
    InvalidRequestError,
    InvalidTransitionError,
    JobNotFoundError,
    NotShortlistedError,
    PaymentAlreadyReleasedError,
    PositionsFilledError,
    UserNotFoundError,
)
from gigmarket.core.security import Principal
from gigmarket.db.unit_of_work import unit_of_work
from gigmarket.models.job import Job
from gigmarket.models.job_application import JobApplication
from gigmarket.models.user import User
from gigmarket.services.inspection_queue import InspectionQueue, job_context
from gigmarket.services.notification_service import enqueue_notification
from gigmarket.services.profile_evaluator import evaluate_profile_url
from gigmarket.services.profile_validation import ensure_profile_complete
from gigmarket.services.score_service import ScoreService
from gigmarket.services.wallet_service import WalletService
from gigmarket.utils.constants import (
    APPLICATION_BLOCKING_STATUSES,
    APPLICATION_STATUS_ACCEPTED,
    APPLICATION_STATUS_APPLIED,
    APPLICATION_STATUS_REJECTED,
    INSPECTION_QUEUED,
    JOB_STATUS_CANCELLED,
    JOB_STATUS_CLOSED,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_IN_PROGRESS,
    JOB_STATUS_OPEN,
    JOB_STATUS_PAID,
    JOB_TYPE_OFFLINE,
    JOB_TYPE_ONLINE,
    JOB_TYPES,
    NOTIFICATION_TYPES,
    SCORE_EVENTS,
)
from gigmarket.utils.helpers import append_unique, parse_leading_int, round2, to_uuid, utc_now

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = [JOB_STATUS_CANCELLED, JOB_STATUS_PAID, JOB_STATUS_COMPLETED]


def application_cap(job: Job) -> int:
    """Maximum number of applications a job takes (FCFS for offline jobs)."""
    multiplier = (
        settings.OFFLINE_APPLICATION_MULTIPLIER
        if job.job_type == JOB_TYPE_OFFLINE
        else settings.ONLINE_APPLICATION_MULTIPLIER
    )
    return max(1, job.positions_required or 1) * multiplier


class JobService:
    """Job and application transitions."""

    def __init__(
        self,
        session_factory: sessionmaker,
        wallet_service: Optional[WalletService] = None,
        score_service: Optional[ScoreService] = None,
        inspection_queue: Optional[InspectionQueue] = None,
    ):
        self.session_factory = session_factory
        self.wallet_service = wallet_service or WalletService(session_factory)
        self.score_service = score_service or ScoreService(session_factory)
        # an inspector we build ourselves is closed after each forced inspection
        self._owns_inspector = inspection_queue is None
        self.inspection_queue = inspection_queue or InspectionQueue(session_factory)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _get_job(db: Session, job_id, lock: bool = True) -> Job:
        query = select(Job).where(Job.id == to_uuid(job_id))
        if lock:
            query = query.with_for_update()
        job = db.execute(query).scalar_one_or_none()
        if job is None:
            raise JobNotFoundError()
        return job

    @staticmethod
    def _get_user(db: Session, user_id) -> User:
        user = db.get(User, to_uuid(user_id))
        if user is None:
            raise UserNotFoundError()
        return user

    @staticmethod
    def _require_owner(job: Job, principal: Principal, allow_admin: bool = False) -> None:
        if allow_admin and principal.is_admin:
            return
        if str(job.employer_id) != str(principal.id):
            raise ForbiddenError("Only the employer who posted this job can do this")

    @staticmethod
    def _require_assigned(job: Job, principal: Principal) -> None:
        if str(principal.id) not in job.assigned_student_ids:
            raise ForbiddenError("You are not assigned to this job")

    @staticmethod
    def _get_application(job: Job, application_id) -> JobApplication:
        application = job.find_application(application_id)
        if application is None:
            raise ApplicationNotFoundError()
        return application

    # ------------------------------------------------------------------
    # Creation and applications
    # ------------------------------------------------------------------

    @unit_of_work
    def create_job(self, db: Session, principal: Principal, data: Dict) -> Job:
        """Create a job for the calling employer."""
        if not principal.is_employer:
            raise ForbiddenError("Only employers can create jobs")

        employer = self._get_user(db, principal.id)
        ensure_profile_complete(employer)

        title = (data.get("title") or "").strip()
        if not title:
            raise InvalidRequestError("Title is required")

        try:
            budget = round2(data.get("budget"))
        except (ArithmeticError, ValueError, TypeError):
            raise InvalidRequestError("Budget must be a number")
        if budget < settings.MIN_TRANSACTION_AMOUNT:
            raise InvalidRequestError("Budget must be greater than zero")

        job_type = data.get("job_type") or JOB_TYPE_OFFLINE
        if job_type not in JOB_TYPES:
            raise InvalidRequestError(f"job_type must be one of {', '.join(JOB_TYPES)}")

        location = data.get("location") or {}
        if job_type == JOB_TYPE_OFFLINE and not location:
            raise InvalidRequestError("Location is required for offline jobs")

        positions = max(1, parse_leading_int(data.get("positions_required")) or 1)
        window_hours = max(
            1,
            parse_leading_int(data.get("shortlist_window_hours")) or settings.DEFAULT_SHORTLIST_WINDOW_HOURS,
        )
        multiplier = max(
            1,
            parse_leading_int(data.get("shortlist_multiplier")) or settings.DEFAULT_SHORTLIST_MULTIPLIER,
        )

        job = Job(
            title=title,
            description=data.get("description"),
            category=data.get("category"),
            budget=budget,
            duration=str(data["duration"]) if data.get("duration") is not None else None,
            skills_required=list(data.get("skills_required") or []),
            employer_id=employer.id,
            job_type=job_type,
            location=location,
            positions_required=positions,
            accepted_count=0,
            assigned_students=[],
            status=JOB_STATUS_OPEN,
            submission_requires_files=bool(data.get("submission_requires_files", False)),
            shortlist_multiplier=multiplier,
            shortlist_window_hours=window_hours,
        )
        db.add(job)
        db.flush()
        logger.info(f"✅ Job created: {job.id} ({job_type}, {positions} positions) by {employer.id}")
        return job

    def apply_for_job(self, principal: Principal, job_id, data: Dict, now=None, session: Session = None) -> Dict:
        """
        Apply the calling student to a job.

        Returns:
            Dict with `application`, `job` and `created` (False when the
            student had already applied)

        Raises:
            ApplicationsClosedError: when the job is not taking applications.
                Reaching the cap also closes the job, and that close is
                committed even though the request is rejected.
        """
        result = self._apply(principal, job_id, data, now=now, session=session)
        if result.get("rejected"):
            raise ApplicationsClosedError(result["rejected"])
        return result

    @unit_of_work
    def _apply(self, db: Session, principal: Principal, job_id, data: Dict, now=None) -> Dict:
        if not principal.is_student:
            raise ForbiddenError("Only students can apply for jobs")

        now = now or utc_now()
        student = self._get_user(db, principal.id)
        ensure_profile_complete(student)

        job = self._get_job(db, job_id)

        existing = job.find_application_by_student(student.id)
        if existing is not None:
            return {"application": existing, "job": job, "created": False}

        if job.status in APPLICATION_BLOCKING_STATUSES:
            raise InvalidTransitionError("This job is no longer accepting applications")

        if job.status == JOB_STATUS_CLOSED:
            return {"rejected": f"Applications closed for this {job.job_type} job"}

        if (job.accepted_count or 0) >= job.positions_required:
            return {"rejected": "Applications closed: all positions have been filled"}

        if len(job.applications) >= application_cap(job):
            job.status = JOB_STATUS_CLOSED
            job.closed_at = job.closed_at or now
            enqueue_notification(
                db,
                NOTIFICATION_TYPES["APPLICATIONS_CLOSED"],
                job.employer_id,
                job=job,
                payload={"application_count": len(job.applications)},
            )
            logger.info(f"🚪 Job {job.id} reached its application cap ({application_cap(job)}) and was closed")
            return {"rejected": f"Applications closed for this {job.job_type} job"}

        proposed_budget = data.get("proposed_budget")
        application = JobApplication(
            student_id=student.id,
            cover_letter=data.get("cover_letter"),
            proposed_budget=round2(proposed_budget) if proposed_budget not in (None, "") else None,
            status=APPLICATION_STATUS_APPLIED,
            shortlisted=False,
            evaluation_score=0,
            created_at=now,
        )

        if job.job_type == JOB_TYPE_ONLINE:
            profile_url = (data.get("profile_url") or "").strip()
            if not profile_url:
                raise InvalidRequestError("Profile URL is required for online jobs")

            evaluation = evaluate_profile_url(profile_url)
            application.profile_url = profile_url
            application.evaluation_score = evaluation["score"]
            application.evaluation_details = {"diagnostics": evaluation["diagnostics"]}

            if job.shortlist_window_ends_at is None:
                job.shortlist_window_ends_at = now + timedelta(hours=job.shortlist_window_hours or 1)

            if settings.ENABLE_REMOTE_PROFILE_INSPECTION:
                application.inspection_status = INSPECTION_QUEUED

        job.applications.append(application)
        # Touch the job so concurrent applies conflict on its version
        job.updated_at = now
        db.flush()

        enqueue_notification(
            db,
            NOTIFICATION_TYPES["APPLICATION_RECEIVED"],
            job.employer_id,
            job=job,
            sender_id=student.id,
            payload={"application_id": str(application.id)},
        )
        logger.info(f"📝 Student {student.id} applied to job {job.id} ({len(job.applications)}/{application_cap(job)})")
        return {"application": application, "job": job, "created": True}

    # ------------------------------------------------------------------
    # Employer decisions on applications
    # ------------------------------------------------------------------

    @unit_of_work
    def accept_application(self, db: Session, principal: Principal, job_id, application_id) -> Dict:
        """Accept an application and assign its student to the job."""
        job = self._get_job(db, job_id)
        self._require_owner(job, principal)
        application = self._get_application(job, application_id)

        if application.status == APPLICATION_STATUS_ACCEPTED:
            return {"application": application, "job": job, "already_accepted": True}
        if application.status == APPLICATION_STATUS_REJECTED:
            raise InvalidTransitionError("Cannot accept a rejected application")
        if job.status in TERMINAL_STATUSES:
            raise InvalidTransitionError("Job is no longer active")
        if (job.accepted_count or 0) >= job.positions_required:
            raise PositionsFilledError()
        if job.job_type == JOB_TYPE_ONLINE and not application.shortlisted:
            raise NotShortlistedError()

        student_id = str(application.student_id)
        application.status = APPLICATION_STATUS_ACCEPTED

        job.assigned_students = append_unique(job.assigned_students, student_id)
        job.accepted_count = len(job.assigned_students)
        if job.accepted_count >= job.positions_required:
            job.status = JOB_STATUS_CLOSED
            job.closed_at = job.closed_at or utc_now()
        else:
            job.status = JOB_STATUS_IN_PROGRESS
        if job.assigned_student_id is None:
            job.assigned_student_id = application.student_id

        # New assignment cycle
        job.student_accepted = False
        job.student_approved = False
        job.employer_approved = False

        enqueue_notification(
            db,
            NOTIFICATION_TYPES["JOB_ACCEPTED"],
            application.student_id,
            job=job,
            sender_id=job.employer_id,
        )
        logger.info(f"✅ Application {application.id} accepted ({job.accepted_count}/{job.positions_required})")
        return {"application": application, "job": job, "already_accepted": False}

    @unit_of_work
    def reject_application(self, db: Session, principal: Principal, job_id, application_id) -> JobApplication:
        """Reject an application. No reputation penalty is applied."""
        job = self._get_job(db, job_id)
        self._require_owner(job, principal)
        application = self._get_application(job, application_id)

        if application.status == APPLICATION_STATUS_REJECTED:
            return application
        if application.status == APPLICATION_STATUS_ACCEPTED:
            raise InvalidTransitionError("Accepted applications cannot be rejected")

        application.status = APPLICATION_STATUS_REJECTED
        logger.info(f"🚫 Application {application.id} rejected")
        return application

    @unit_of_work
    def penalize_no_show(self, db: Session, principal: Principal, job_id, student_id, reason: Optional[str] = None) -> Dict:
        """Apply the no-show / fake-apply penalty. Job and application state are untouched."""
        job = self._get_job(db, job_id, lock=False)
        self._require_owner(job, principal)
        self._get_user(db, student_id)

        return self.score_service.adjust_score(
            student_id,
            SCORE_EVENTS["NO_SHOW_FAKE_APPLY"],
            "no_show_fake_apply",
            reason=reason,
            meta={"job_id": str(job.id)},
            session=db,
        )

    def force_inspect_application(self, principal: Principal, job_id, application_id) -> JobApplication:
        """Run remote profile inspection now instead of waiting for the queue."""
        task = self._inspection_task(principal, job_id, application_id)
        inspector = self.inspection_queue.inspector
        try:
            result = inspector.inspect_profile_url(task["profile_url"], task["job_context"])
        finally:
            if self._owns_inspector:
                inspector.close()
        return self.inspection_queue.apply_result(task["application_id"], result)

    @unit_of_work
    def _inspection_task(self, db: Session, principal: Principal, job_id, application_id) -> Dict:
        job = self._get_job(db, job_id, lock=False)
        self._require_owner(job, principal, allow_admin=True)
        application = self._get_application(job, application_id)
        if not application.profile_url:
            raise InvalidRequestError("Application has no profile URL")
        return {
            "application_id": application.id,
            "profile_url": application.profile_url,
            "job_context": job_context(job),
        }

    # ------------------------------------------------------------------
    # Assigned student
    # ------------------------------------------------------------------

    @unit_of_work
    def accept_assignment(self, db: Session, principal: Principal, job_id) -> Job:
        job = self._get_job(db, job_id)
        self._require_assigned(job, principal)

        if job.student_accepted:
            return job
        if job.status in TERMINAL_STATUSES:
            raise InvalidTransitionError("Job is no longer active")

        job.student_accepted = True
        job.status = JOB_STATUS_IN_PROGRESS

        enqueue_notification(
            db,
            NOTIFICATION_TYPES["ASSIGNMENT_ACCEPTED"],
            job.employer_id,
            job=job,
            sender_id=principal.id,
        )
        logger.info(f"🤝 Student {principal.id} accepted assignment for job {job.id}")
        return job

    def submit_work(
        self,
        principal: Principal,
        job_id,
        description: Optional[str] = None,
        attachments: Optional[List[str]] = None,
        now=None,
    ) -> Dict:
        """
        Record the assigned student's submission.

        Returns:
            Dict with `job` and `on_time_awarded`
        """
        job = self._submit(principal, job_id, description, attachments, now=now)

        on_time = self._is_on_time(job)
        awarded = False
        if on_time:
            awarded = self.score_service.award_best_effort(
                principal.id,
                "ON_TIME_SUBMISSION",
                reason="Submitted within the job duration",
                meta={"job_id": str(job.id)},
            ) is not None
        return {"job": job, "on_time_awarded": awarded}

    @staticmethod
    def _is_on_time(job: Job) -> bool:
        days = parse_leading_int(job.duration)
        if days is None:
            return not settings.ON_TIME_AWARD_REQUIRES_NUMERIC_DURATION
        submitted_at = (job.submission or {}).get("submitted_at")
        if not submitted_at:
            return False
        return datetime.fromisoformat(submitted_at) <= job.created_at + timedelta(days=days)

    @unit_of_work
    def _submit(self, db: Session, principal: Principal, job_id, description, attachments, now=None) -> Job:
        job = self._get_job(db, job_id)
        self._require_assigned(job, principal)

        if not job.student_accepted:
            raise InvalidTransitionError("Accept the assignment before submitting work")
        if job.status not in (JOB_STATUS_IN_PROGRESS, JOB_STATUS_CLOSED):
            raise InvalidTransitionError("Work can only be submitted for jobs in progress")

        description = (description or "").strip()
        attachments = [a for a in (attachments or []) if a]

        if job.submission_requires_files and not attachments:
            raise InvalidRequestError("This job requires file attachments in the submission")
        if not description and not attachments:
            raise InvalidRequestError("Submission requires a description or at least one attachment")

        now = now or utc_now()
        job.submission = {
            "description": description,
            "attachments": attachments,
            "submitted_at": now.isoformat(),
            "submitted_by": str(principal.id),
        }
        job.student_approved = True

        enqueue_notification(
            db,
            NOTIFICATION_TYPES["JOB_COMPLETED"],
            job.employer_id,
            job=job,
            sender_id=principal.id,
        )
        logger.info(f"📦 Work submitted for job {job.id} by {principal.id}")
        return job

    # ------------------------------------------------------------------
    # Employer approval, escrow and payment
    # ------------------------------------------------------------------

    def approve_completion(self, principal: Principal, job_id) -> Dict:
        """Employer approves the submitted work; awards completion reputation."""
        job = self._approve(principal, job_id)

        recipient = (job.submission or {}).get("submitted_by") or (
            str(job.assigned_student_id) if job.assigned_student_id else None
        )
        awarded = False
        if recipient:
            awarded = self.score_service.award_best_effort(
                recipient,
                "JOB_COMPLETED",
                reason="Employer approved the work",
                meta={"job_id": str(job.id)},
            ) is not None
        return {"job": job, "completion_awarded": awarded}

    @unit_of_work
    def _approve(self, db: Session, principal: Principal, job_id) -> Job:
        job = self._get_job(db, job_id)
        self._require_owner(job, principal)

        if not job.student_approved:
            raise InvalidTransitionError("The student has not submitted the work yet")
        if job.employer_approved:
            raise InvalidTransitionError("Work already approved")

        job.employer_approved = True

        recipient = (job.submission or {}).get("submitted_by") or job.assigned_student_id
        if recipient:
            enqueue_notification(
                db,
                NOTIFICATION_TYPES["JOB_APPROVED"],
                recipient,
                job=job,
                sender_id=job.employer_id,
            )
        logger.info(f"👍 Job {job.id} approved by employer")
        return job

    @unit_of_work
    def fund_escrow(self, db: Session, principal: Principal, job_id) -> Dict:
        """Move the job budget from the employer's balance into escrow."""
        job = self._get_job(db, job_id)
        self._require_owner(job, principal)

        if job.status in TERMINAL_STATUSES:
            raise InvalidTransitionError("Job is no longer active")
        offline_assigned = job.job_type == JOB_TYPE_OFFLINE and job.assigned_student_id is not None
        if job.status != JOB_STATUS_IN_PROGRESS and not offline_assigned:
            raise InvalidTransitionError("Job must be in progress before funding escrow")
        if job.assigned_student_id is None:
            raise InvalidTransitionError("No student assigned to this job")
        if (job.escrow_amount or Decimal("0")) > 0:
            raise InvalidTransitionError("Job payment already held in escrow")
        if job.payment_released:
            raise PaymentAlreadyReleasedError()

        amount = round2(job.budget)
        tx = self.wallet_service.move_to_escrow(
            job.employer_id,
            amount,
            job_id=job.id,
            description=f"Escrow for job: {job.title}",
            session=db,
        )
        job.escrow_amount = amount
        logger.info(f"🔒 Escrow funded for job {job.id}: {amount}")
        return {"job": job, "transaction": tx}

    @unit_of_work
    def release_payment(self, db: Session, principal: Principal, job_id) -> Dict:
        """Release escrow to the student once both sides approved."""
        job = self._get_job(db, job_id)
        self._require_owner(job, principal, allow_admin=True)

        if job.payment_released:
            raise PaymentAlreadyReleasedError()
        if not job.student_approved:
            raise InvalidTransitionError("The student has not submitted the work yet")
        if not job.employer_approved:
            raise InvalidTransitionError("Approve the completed work before releasing payment")

        result = self.wallet_service.release_from_escrow(job, session=db)

        enqueue_notification(
            db,
            NOTIFICATION_TYPES["PAYMENT_RECEIVED"],
            job.assigned_student_id,
            job=job,
            sender_id=job.employer_id,
            payload={"amount": str(result["payout"])},
        )
        enqueue_notification(
            db,
            NOTIFICATION_TYPES["PAYMENT_RELEASED"],
            job.employer_id,
            job=job,
            payload={"amount": str(result["payment"].amount)},
        )
        result["job"] = job
        return result

    @unit_of_work
    def cancel_job(self, db: Session, principal: Principal, job_id, reason: Optional[str] = None) -> Dict:
        """
        Cancel a job. Escrowed funds go back to the employer's balance.

        Paid jobs and jobs whose payment was released cannot be cancelled.
        """
        job = self._get_job(db, job_id)
        self._require_owner(job, principal, allow_admin=True)

        if job.status == JOB_STATUS_CANCELLED:
            raise InvalidTransitionError("Job is already cancelled")
        if job.status == JOB_STATUS_PAID or job.payment_released:
            raise InvalidTransitionError("Paid jobs cannot be cancelled")

        refund = None
        if (job.escrow_amount or Decimal("0")) > 0:
            refund = self.wallet_service.refund_from_escrow(
                job,
                description=f"Refund for cancelled job: {job.title}",
                session=db,
            )
        else:
            job.status = JOB_STATUS_CANCELLED

        job.cancelled_at = utc_now()
        job.cancellation_reason = reason

        for student_id in job.assigned_student_ids:
            enqueue_notification(
                db,
                NOTIFICATION_TYPES["JOB_CANCELLED"],
                student_id,
                job=job,
                sender_id=job.employer_id,
                payload={"reason": reason or ""},
            )
        logger.info(f"❌ Job {job.id} cancelled (refund: {refund.amount if refund else 0})")
        return {"job": job, "refund": refund}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @unit_of_work
    def get_job(self, db: Session, job_id) -> Job:
        return self._get_job(db, job_id, lock=False)

    @unit_of_work
    def list_jobs(
        self,
        db: Session,
        principal: Principal,
        mine: bool = False,
        status: Optional[str] = None,
        job_type: Optional[str] = None,
        limit: int = None,
        offset: int = 0,
    ) -> List[Job]:
        query = select(Job)
        if mine:
            if principal.is_employer:
                query = query.where(Job.employer_id == to_uuid(principal.id))
            else:
                applied = select(JobApplication.job_id).where(JobApplication.student_id == to_uuid(principal.id))
                query = query.where(or_(Job.id.in_(applied), Job.assigned_student_id == to_uuid(principal.id)))
        if status:
            query = query.where(Job.status == status)
        if job_type:
            query = query.where(Job.job_type == job_type)

        limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
        query = query.order_by(Job.created_at.desc()).offset(offset).limit(limit)
        return list(db.execute(query).scalars())

    @unit_of_work
    def get_shortlisted_candidates(self, db: Session, principal: Principal, job_id) -> List[JobApplication]:
        job = self._get_job(db, job_id, lock=False)
        self._require_owner(job, principal, allow_admin=True)
        shortlisted = [a for a in job.applications if a.shortlisted]
        return sorted(shortlisted, key=lambda a: (-(a.evaluation_score or 0), a.created_at))

    @unit_of_work
    def get_submission(self, db: Session, principal: Principal, job_id) -> Dict:
        job = self._get_job(db, job_id, lock=False)
        is_owner = str(job.employer_id) == str(principal.id)
        if not (is_owner or principal.is_admin or str(principal.id) in job.assigned_student_ids):
            raise ForbiddenError("Not authorized to view this submission")
        return {
            "job_id": str(job.id),
            "submission": job.submission,
            "student_approved": job.student_approved,
            "employer_approved": job.employer_approved,
            "payment_released": job.payment_released,
        }

    @unit_of_work
    def get_my_applications(self, db: Session, principal: Principal) -> List[JobApplication]:
        if not principal.is_student:
            raise ForbiddenError("Only students have applications")
        return list(
            db.execute(
                select(JobApplication)
                .where(JobApplication.student_id == to_uuid(principal.id))
                .order_by(JobApplication.created_at.desc())
            ).scalars()
        )
