"""
Marketplace error taxonomy.

Every business failure raised by the ledger, the job state machine or the
scoring ledger is a MarketplaceError carrying a `kind` and the HTTP status
the API layer answers with.
"""

from typing import List, Optional


class MarketplaceError(Exception):
    """Base class for all marketplace errors."""

    kind = "error"
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message, "kind": self.kind}


# Validation
class InvalidRequestError(MarketplaceError):
    kind = "validation"
    default_message = "Invalid request"


class ProfileIncompleteError(InvalidRequestError):
    """Raised when a user's profile misses role-required fields."""

    def __init__(self, missing_fields: List[str], message: Optional[str] = None):
        self.missing_fields = missing_fields
        super().__init__(message or "Profile incomplete. Missing fields: " + ", ".join(missing_fields))

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["missing_fields"] = self.missing_fields
        return data


# Conflict / state
class ConflictError(MarketplaceError):
    kind = "conflict"
    default_message = "Operation conflicts with the current state"


class InvalidTransitionError(ConflictError):
    default_message = "Invalid state transition"


class ApplicationsClosedError(ConflictError):
    default_message = "Applications closed for this job"


class PositionsFilledError(ConflictError):
    default_message = "Required number of applicants already accepted"


class NotShortlistedError(ConflictError):
    default_message = "Only shortlisted applications can be accepted for online jobs"


class PaymentAlreadyReleasedError(ConflictError):
    default_message = "Payment already released"


class DuplicateReviewError(ConflictError):
    default_message = "You have already reviewed this job"


class ReviewWindowClosedError(ConflictError):
    default_message = "Reviews can only be edited within 24 hours"


# Authorization
class ForbiddenError(MarketplaceError):
    kind = "forbidden"
    status_code = 403
    default_message = "Not authorized to perform this action"


# Resource missing
class NotFoundError(MarketplaceError):
    kind = "not_found"
    status_code = 404
    default_message = "Resource not found"


class JobNotFoundError(NotFoundError):
    default_message = "Job not found"


class ApplicationNotFoundError(NotFoundError):
    default_message = "Application not found"


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


class WalletNotFoundError(NotFoundError):
    default_message = "Wallet not found"


class EmployerWalletNotFoundError(WalletNotFoundError):
    default_message = "Employer wallet not found"


class StudentWalletNotFoundError(WalletNotFoundError):
    default_message = "Student wallet not found"


class TransactionNotFoundError(NotFoundError):
    default_message = "Transaction not found"


class NotificationNotFoundError(NotFoundError):
    default_message = "Notification not found"


class ReviewNotFoundError(NotFoundError):
    default_message = "Review not found"


# Insufficient funds
class InsufficientBalanceError(MarketplaceError):
    kind = "insufficient_funds"
    default_message = "Insufficient balance"


class InsufficientEscrowBalanceError(InsufficientBalanceError):
    default_message = "Insufficient escrow balance"


# Transient
class ConcurrencyConflictError(MarketplaceError):
    kind = "concurrency"
    status_code = 503
    default_message = "Resource is busy, please retry"


# Soft side effects (notifications, remote inspection)
class ExternalServiceError(MarketplaceError):
    kind = "external"
    status_code = 502
    default_message = "External service failure"
