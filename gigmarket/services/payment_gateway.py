"""Payment gateway signature verification (orders are created by the gateway client)."""

import hashlib
import hmac
import logging

from gigmarket.config import settings

logger = logging.getLogger(__name__)


class GatewaySignatureVerifier:
    """Verify `order_id|payment_id` HMAC-SHA256 signatures sent back by the gateway."""

    def __init__(self, key_secret: str = None):
        self.key_secret = key_secret if key_secret is not None else settings.PAYMENT_GATEWAY_KEY_SECRET

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        body = f"{order_id}|{payment_id}".encode()
        return hmac.new(self.key_secret.encode(), body, hashlib.sha256).hexdigest()

    def verify(self, order_id: str, payment_id: str, signature: str) -> bool:
        if not self.key_secret:
            logger.warning("⚠️  PAYMENT_GATEWAY_KEY_SECRET not configured - rejecting payment signature")
            return False
        if not order_id or not payment_id or not signature:
            return False
        return hmac.compare_digest(self.expected_signature(order_id, payment_id), signature)
