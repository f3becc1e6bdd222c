"""Common constants."""

from gigmarket.config import settings

# User roles
ROLE_STUDENT = "student"
ROLE_EMPLOYER = "employer"
ROLE_ADMIN = "admin"
USER_ROLES = [ROLE_STUDENT, ROLE_EMPLOYER, ROLE_ADMIN]

# Job types
JOB_TYPE_OFFLINE = "offline"
JOB_TYPE_ONLINE = "online"
JOB_TYPES = [JOB_TYPE_OFFLINE, JOB_TYPE_ONLINE]

# Job statuses
JOB_STATUS_OPEN = "open"
JOB_STATUS_IN_PROGRESS = "in_progress"
JOB_STATUS_COMPLETED = "completed"
JOB_STATUS_PAID = "paid"
JOB_STATUS_CANCELLED = "cancelled"
JOB_STATUS_CLOSED = "closed"
JOB_STATUSES = [
    JOB_STATUS_OPEN,
    JOB_STATUS_IN_PROGRESS,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_PAID,
    JOB_STATUS_CANCELLED,
    JOB_STATUS_CLOSED,
]

# No new applications are taken in these states
APPLICATION_BLOCKING_STATUSES = [JOB_STATUS_CANCELLED, JOB_STATUS_PAID, JOB_STATUS_COMPLETED]

# Application statuses
APPLICATION_STATUS_APPLIED = "applied"
APPLICATION_STATUS_ACCEPTED = "accepted"
APPLICATION_STATUS_REJECTED = "rejected"
APPLICATION_STATUSES = [
    APPLICATION_STATUS_APPLIED,
    APPLICATION_STATUS_ACCEPTED,
    APPLICATION_STATUS_REJECTED,
]

# Inspection statuses
INSPECTION_QUEUED = "queued"
INSPECTION_INSPECTING = "inspecting"
INSPECTION_DONE = "done"
INSPECTION_FAILED = "failed"

# Transaction types
TX_DEPOSIT = "deposit"
TX_WITHDRAWAL = "withdrawal"
TX_PAYMENT = "payment"
TX_REFUND = "refund"
TX_COMMISSION = "commission"
TX_EARNING = "earning"
TRANSACTION_TYPES = [TX_DEPOSIT, TX_WITHDRAWAL, TX_PAYMENT, TX_REFUND, TX_COMMISSION, TX_EARNING]

# Payment statuses
PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"
PAYMENT_FAILED = "failed"
PAYMENT_REFUNDED = "refunded"
PAYMENT_STATUSES = [PAYMENT_PENDING, PAYMENT_COMPLETED, PAYMENT_FAILED, PAYMENT_REFUNDED]

# Notification events
NOTIFICATION_TYPES = {
    "JOB_POSTED": "job_posted",
    "JOB_ACCEPTED": "job_accepted",
    "JOB_COMPLETED": "job_completed",
    "JOB_APPROVED": "job_approved",
    "JOB_CANCELLED": "job_cancelled",
    "JOB_SHORTLISTED": "job_shortlisted",
    "JOB_NOT_SHORTLISTED": "job_not_shortlisted",
    "APPLICATION_RECEIVED": "application_received",
    "APPLICATIONS_CLOSED": "applications_closed",
    "ASSIGNMENT_ACCEPTED": "assignment_accepted",
    "PAYMENT_RECEIVED": "payment_received",
    "PAYMENT_RELEASED": "payment_released",
    "REVIEW_RECEIVED": "review_received",
    "SYSTEM_ANNOUNCEMENT": "system_announcement",
}

# Outbox statuses
OUTBOX_PENDING = "pending"
OUTBOX_DISPATCHING = "dispatching"
OUTBOX_SENT = "sent"
OUTBOX_FAILED = "failed"

# Reputation events
SCORE_EVENTS = {
    "NEW_STUDENT": 35,
    "JOB_COMPLETED": 8,
    "ON_TIME_SUBMISSION": 4,
    "NO_SHOW_FAKE_APPLY": -20,
}

INITIAL_STUDENT_SCORE = SCORE_EVENTS["NEW_STUDENT"]
INITIAL_OTHER_SCORE = 0

# Default platform commission (can be overridden via env)
PLATFORM_COMMISSION_RATE = settings.PLATFORM_COMMISSION_RATE

# Reviews
REVIEW_ASPECTS = ["communication", "quality", "timeliness", "professionalism"]
REVIEW_EDIT_WINDOW_HOURS = 24
