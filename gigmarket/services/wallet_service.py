"""
Wallet Service - Escrow Ledger

All balance changes go through this service. Every public operation is one
unit of work: the wallet row is read with a row lock (and a version check),
validated, updated and paired with exactly one Transaction row per wallet
mutation before the commit. Nothing partial is ever visible to other
requests.

Operations:
- create_wallet / get_wallet / list_transactions
- add_funds, record_pending_deposit, complete_deposit
- request_withdrawal, mark_transaction_completed, mark_transaction_failed
- move_to_escrow, release_from_escrow, refund_from_escrow
"""

import logging
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from gigmarket.config import settings
from gigmarket.core.exceptions import (
    ConflictError,
    EmployerWalletNotFoundError,
    InsufficientBalanceError,
    InsufficientEscrowBalanceError,
    InvalidRequestError,
    JobNotFoundError,
    StudentWalletNotFoundError,
    TransactionNotFoundError,
    UserNotFoundError,
    WalletNotFoundError,
)
from gigmarket.db.unit_of_work import unit_of_work
from gigmarket.models.job import Job
from gigmarket.models.platform_setting import PlatformSetting
from gigmarket.models.transaction import Transaction
from gigmarket.models.user import User
from gigmarket.models.wallet import Wallet
from gigmarket.services.payment_gateway import GatewaySignatureVerifier
from gigmarket.utils.constants import (
    JOB_STATUS_CANCELLED,
    JOB_STATUS_PAID,
    PAYMENT_COMPLETED,
    PAYMENT_FAILED,
    PAYMENT_PENDING,
    TX_COMMISSION,
    TX_DEPOSIT,
    TX_EARNING,
    TX_PAYMENT,
    TX_REFUND,
    TX_WITHDRAWAL,
)
from gigmarket.utils.helpers import paginate, round2, to_uuid, utc_now

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class WalletService:
    """Atomic wallet and escrow operations."""

    def __init__(self, session_factory: sessionmaker, verifier: GatewaySignatureVerifier = None):
        self.session_factory = session_factory
        self.verifier = verifier or GatewaySignatureVerifier()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_amount(amount) -> Decimal:
        try:
            value = round2(amount)
        except (ArithmeticError, ValueError, TypeError):
            raise InvalidRequestError("Invalid amount")
        if value < settings.MIN_TRANSACTION_AMOUNT:
            raise InvalidRequestError(f"Amount must be at least {settings.MIN_TRANSACTION_AMOUNT}")
        return value

    @staticmethod
    def _lock_wallet(db: Session, user_id) -> Optional[Wallet]:
        return db.execute(
            select(Wallet).where(Wallet.user_id == to_uuid(user_id)).with_for_update()
        ).scalar_one_or_none()

    @staticmethod
    def _load_job(db: Session, job) -> Job:
        if isinstance(job, Job) and job in db:
            return job
        job_id = job.id if isinstance(job, Job) else to_uuid(job)
        loaded = db.execute(select(Job).where(Job.id == job_id).with_for_update()).scalar_one_or_none()
        if loaded is None:
            raise JobNotFoundError()
        return loaded

    @staticmethod
    def _platform_user_id(db: Session):
        """Commission recipient: env setting first, then the platform_settings row."""
        if settings.PLATFORM_USER_ID:
            return to_uuid(settings.PLATFORM_USER_ID)
        row = db.execute(select(PlatformSetting).limit(1)).scalar_one_or_none()
        return row.platform_user_id if row else None

    # ------------------------------------------------------------------
    # Wallet lifecycle and reads
    # ------------------------------------------------------------------

    @unit_of_work
    def create_wallet(self, db: Session, user_id) -> Wallet:
        """Create a wallet for a phone-verified user; returns the existing one if present."""
        user = db.get(User, to_uuid(user_id))
        if user is None:
            raise UserNotFoundError()
        if not user.phone or not user.is_phone_verified:
            raise InvalidRequestError("Phone number must be verified before creating a wallet")

        wallet = db.execute(select(Wallet).where(Wallet.user_id == user.id)).scalar_one_or_none()
        if wallet is not None:
            return wallet

        wallet = Wallet(user_id=user.id)
        db.add(wallet)
        db.flush()
        logger.info(f"✅ Wallet created for user {user.id}")
        return wallet

    @unit_of_work
    def get_wallet(self, db: Session, user_id) -> Wallet:
        wallet = db.execute(select(Wallet).where(Wallet.user_id == to_uuid(user_id))).scalar_one_or_none()
        if wallet is None:
            raise WalletNotFoundError()
        return wallet

    @unit_of_work
    def list_transactions(
        self,
        db: Session,
        user_id,
        transaction_type: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = None,
    ) -> Dict:
        """Paginated transaction history, newest first."""
        offset, limit = paginate(page, limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)

        filters = [Transaction.user_id == to_uuid(user_id)]
        if transaction_type:
            filters.append(Transaction.transaction_type == transaction_type)
        if status:
            filters.append(Transaction.status == status)

        total = db.execute(select(func.count(Transaction.id)).where(*filters)).scalar_one()
        rows = db.execute(
            select(Transaction)
            .where(*filters)
            .order_by(Transaction.initiated_at.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()

        return {
            "transactions": list(rows),
            "total": total,
            "page": offset // limit + 1,
            "limit": limit,
            "pages": (total + limit - 1) // limit,
        }

    # ------------------------------------------------------------------
    # Deposits and withdrawals
    # ------------------------------------------------------------------

    @unit_of_work
    def add_funds(
        self,
        db: Session,
        user_id,
        amount,
        description: str = "Deposit",
        metadata: Optional[Dict] = None,
        gateway: Optional[str] = None,
    ) -> Transaction:
        """Credit a verified deposit."""
        amount = self._validate_amount(amount)
        wallet = self._lock_wallet(db, user_id)
        if wallet is None:
            raise WalletNotFoundError()

        wallet.balance = round2(wallet.balance + amount)

        tx = Transaction(
            user_id=wallet.user_id,
            transaction_type=TX_DEPOSIT,
            amount=amount,
            status=PAYMENT_COMPLETED,
            description=description,
            gateway=gateway,
            extra_data=metadata or {},
            completed_at=utc_now(),
        )
        db.add(tx)
        db.flush()
        logger.info(f"💰 Deposit of {amount} credited to wallet {wallet.id}")
        return tx

    @unit_of_work
    def record_pending_deposit(
        self,
        db: Session,
        user_id,
        amount,
        order_id: str,
        gateway: str = "razorpay",
    ) -> Transaction:
        """Record the intent of a gateway deposit; the wallet is untouched until completion."""
        amount = self._validate_amount(amount)
        wallet = db.execute(select(Wallet).where(Wallet.user_id == to_uuid(user_id))).scalar_one_or_none()
        if wallet is None:
            raise WalletNotFoundError()

        tx = Transaction(
            user_id=wallet.user_id,
            transaction_type=TX_DEPOSIT,
            amount=amount,
            status=PAYMENT_PENDING,
            description="Wallet deposit",
            gateway=gateway,
            gateway_order_id=order_id,
        )
        db.add(tx)
        db.flush()
        return tx

    @unit_of_work
    def complete_deposit(
        self,
        db: Session,
        user_id,
        transaction_id,
        payment_id: str,
        signature: str,
    ) -> Transaction:
        """
        Verify the gateway signature and credit a pending deposit exactly once.

        The pending transaction itself becomes the completed deposit record,
        so the mutation is still paired with exactly one Transaction.
        """
        tx = db.execute(
            select(Transaction)
            .where(
                Transaction.id == to_uuid(transaction_id),
                Transaction.user_id == to_uuid(user_id),
                Transaction.transaction_type == TX_DEPOSIT,
            )
            .with_for_update()
        ).scalar_one_or_none()
        if tx is None:
            raise TransactionNotFoundError()
        if tx.status != PAYMENT_PENDING:
            raise ConflictError("Transaction already processed")

        if not self.verifier.verify(tx.gateway_order_id, payment_id, signature):
            tx.status = PAYMENT_FAILED
            tx.failed_at = utc_now()
            tx.failure_reason = "Invalid payment signature"
            logger.warning(f"⚠️  Invalid payment signature for transaction {tx.id}")
            return tx

        wallet = self._lock_wallet(db, user_id)
        if wallet is None:
            raise WalletNotFoundError()

        wallet.balance = round2(wallet.balance + tx.amount)
        tx.status = PAYMENT_COMPLETED
        tx.gateway_payment_id = payment_id
        tx.gateway_signature = signature
        tx.completed_at = utc_now()
        logger.info(f"💰 Gateway deposit {tx.id} of {tx.amount} credited to wallet {wallet.id}")
        return tx

    @unit_of_work
    def request_withdrawal(
        self,
        db: Session,
        user_id,
        amount,
        description: str = "Withdrawal to bank",
        metadata: Optional[Dict] = None,
    ) -> Transaction:
        """Debit the balance and record a pending withdrawal; settlement happens outside."""
        amount = self._validate_amount(amount)
        wallet = self._lock_wallet(db, user_id)
        if wallet is None:
            raise WalletNotFoundError()
        if wallet.balance < amount:
            raise InsufficientBalanceError()

        wallet.balance = round2(wallet.balance - amount)
        wallet.total_spent = round2((wallet.total_spent or ZERO) + amount)

        tx = Transaction(
            user_id=wallet.user_id,
            transaction_type=TX_WITHDRAWAL,
            amount=amount,
            status=PAYMENT_PENDING,
            description=description,
            extra_data=metadata or {},
        )
        db.add(tx)
        db.flush()
        logger.info(f"🏦 Withdrawal of {amount} requested from wallet {wallet.id}")
        return tx

    def _settle(self, db: Session, transaction_id, new_status: str, reason: Optional[str] = None) -> Transaction:
        tx = db.execute(
            select(Transaction).where(Transaction.id == to_uuid(transaction_id)).with_for_update()
        ).scalar_one_or_none()
        if tx is None:
            raise TransactionNotFoundError()
        if tx.status != PAYMENT_PENDING:
            raise ConflictError(f"Transaction is already {tx.status}")

        tx.status = new_status
        if new_status == PAYMENT_COMPLETED:
            tx.completed_at = utc_now()
        else:
            tx.failed_at = utc_now()
            tx.failure_reason = reason
        return tx

    @unit_of_work
    def mark_transaction_completed(self, db: Session, transaction_id) -> Transaction:
        return self._settle(db, transaction_id, PAYMENT_COMPLETED)

    @unit_of_work
    def mark_transaction_failed(self, db: Session, transaction_id, reason: Optional[str] = None) -> Transaction:
        return self._settle(db, transaction_id, PAYMENT_FAILED, reason)

    # ------------------------------------------------------------------
    # Escrow
    # ------------------------------------------------------------------

    @unit_of_work
    def move_to_escrow(
        self,
        db: Session,
        user_id,
        amount,
        job_id=None,
        description: str = "Move to escrow",
    ) -> Transaction:
        """Move spendable balance into escrow for a job."""
        amount = self._validate_amount(amount)
        wallet = self._lock_wallet(db, user_id)
        if wallet is None:
            raise WalletNotFoundError()
        if wallet.balance < amount:
            raise InsufficientBalanceError()

        wallet.balance = round2(wallet.balance - amount)
        wallet.escrow_balance = round2(wallet.escrow_balance + amount)

        tx = Transaction(
            user_id=wallet.user_id,
            transaction_type=TX_PAYMENT,
            amount=amount,
            status=PAYMENT_COMPLETED,
            description=description,
            job_id=to_uuid(job_id),
            completed_at=utc_now(),
        )
        db.add(tx)
        db.flush()
        logger.info(f"🔒 {amount} moved to escrow for job {job_id}")
        return tx

    @unit_of_work
    def release_from_escrow(self, db: Session, job) -> Dict:
        """
        Pay the assigned student from the employer's escrow, minus commission.

        Returns:
            Dict with payment, earning and commission transactions (commission
            is None when the computed commission is zero)
        """
        job = self._load_job(db, job)

        amount = round2(job.escrow_amount or ZERO)
        if amount <= ZERO:
            raise InvalidRequestError("No payment to release")

        employer_wallet = self._lock_wallet(db, job.employer_id)
        if employer_wallet is None:
            raise EmployerWalletNotFoundError()
        if employer_wallet.escrow_balance < amount:
            raise InsufficientEscrowBalanceError()

        student_id = job.assigned_student_id
        student_wallet = self._lock_wallet(db, student_id) if student_id else None
        if student_wallet is None:
            raise StudentWalletNotFoundError()

        rate = Decimal(str(settings.PLATFORM_COMMISSION_RATE))
        commission = round2(amount * rate)
        payout = round2(amount - commission)
        now = utc_now()

        employer_wallet.escrow_balance = round2(employer_wallet.escrow_balance - amount)

        student_wallet.balance = round2(student_wallet.balance + payout)
        student_wallet.total_earnings = round2((student_wallet.total_earnings or ZERO) + payout)

        # Without a configured platform user the employer is taxed to itself
        recipient_id = self._platform_user_id(db) or job.employer_id
        commission_tx = None
        if commission > ZERO:
            if recipient_id == employer_wallet.user_id:
                recipient_wallet = employer_wallet
            elif recipient_id == student_wallet.user_id:
                recipient_wallet = student_wallet
            else:
                recipient_wallet = self._lock_wallet(db, recipient_id)
                if recipient_wallet is None:
                    recipient_wallet = Wallet(user_id=recipient_id)
                    db.add(recipient_wallet)
                    db.flush()
                    logger.info(f"✅ Platform wallet created for user {recipient_id}")
            recipient_wallet.balance = round2((recipient_wallet.balance or ZERO) + commission)

            commission_tx = Transaction(
                user_id=recipient_id,
                transaction_type=TX_COMMISSION,
                amount=commission,
                status=PAYMENT_COMPLETED,
                description=f"Commission for job: {job.title}",
                job_id=job.id,
                completed_at=now,
            )
            db.add(commission_tx)

        payment_tx = Transaction(
            user_id=job.employer_id,
            transaction_type=TX_PAYMENT,
            amount=amount,
            status=PAYMENT_COMPLETED,
            description=f"Payment for job: {job.title}",
            job_id=job.id,
            related_user_id=student_id,
            commission_rate=rate,
            commission_amount=commission,
            completed_at=now,
        )
        earning_tx = Transaction(
            user_id=student_id,
            transaction_type=TX_EARNING,
            amount=payout,
            status=PAYMENT_COMPLETED,
            description=f"Earning for job: {job.title}",
            job_id=job.id,
            related_user_id=job.employer_id,
            completed_at=now,
        )
        db.add_all([payment_tx, earning_tx])

        job.payment_released = True
        job.status = JOB_STATUS_PAID
        job.escrow_amount = ZERO
        job.paid_at = now
        db.flush()

        logger.info(
            f"✅ Released {amount} for job {job.id}: payout {payout}, commission {commission} -> {recipient_id}"
        )
        return {
            "payment": payment_tx,
            "earning": earning_tx,
            "commission": commission_tx,
            "payout": payout,
            "commission_amount": commission,
        }

    @unit_of_work
    def refund_from_escrow(self, db: Session, job, description: Optional[str] = None) -> Transaction:
        """Return a job's escrow to the employer's balance and cancel the job."""
        job = self._load_job(db, job)

        amount = round2(job.escrow_amount or ZERO)
        if amount <= ZERO:
            raise InvalidRequestError("No escrow to refund")

        wallet = self._lock_wallet(db, job.employer_id)
        if wallet is None:
            raise EmployerWalletNotFoundError()
        if wallet.escrow_balance < amount:
            raise InsufficientEscrowBalanceError()

        wallet.escrow_balance = round2(wallet.escrow_balance - amount)
        wallet.balance = round2(wallet.balance + amount)

        tx = Transaction(
            user_id=job.employer_id,
            transaction_type=TX_REFUND,
            amount=amount,
            status=PAYMENT_COMPLETED,
            description=description or f"Refund for job: {job.title}",
            related_user_id=job.assigned_student_id,
            job_id=job.id,
            completed_at=utc_now(),
        )
        db.add(tx)

        job.escrow_amount = ZERO
        job.status = JOB_STATUS_CANCELLED
        db.flush()
        logger.info(f"↩️  Refunded {amount} escrow for job {job.id}")
        return tx

    @unit_of_work
    def set_platform_user(self, db: Session, user_id) -> PlatformSetting:
        """Store the commission recipient in the platform_settings row."""
        user = db.get(User, to_uuid(user_id))
        if user is None:
            raise UserNotFoundError()
        row = db.execute(select(PlatformSetting).limit(1)).scalar_one_or_none()
        if row is None:
            row = PlatformSetting(key="default")
            db.add(row)
        row.platform_user_id = user.id
        db.flush()
        return row
