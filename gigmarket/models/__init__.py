"""Database models."""

# Import all models in dependency order to ensure proper relationship initialization

# Base models (no foreign keys)
from gigmarket.models.user import User
from gigmarket.models.platform_setting import PlatformSetting

# Models with foreign keys to users
from gigmarket.models.wallet import Wallet
from gigmarket.models.job import Job
from gigmarket.models.score_log import ScoreLog

# Models with foreign keys to jobs
from gigmarket.models.job_application import JobApplication
from gigmarket.models.transaction import Transaction
from gigmarket.models.notification_outbox import NotificationOutbox
from gigmarket.models.review import Review

# Export all models
__all__ = [
    "User",
    "PlatformSetting",
    "Wallet",
    "Job",
    "ScoreLog",
    "JobApplication",
    "Transaction",
    "NotificationOutbox",
    "Review",
]
