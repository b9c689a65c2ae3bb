"""
Simulated payment step used by checkout.

No provider is wired in; every charge succeeds and gets a local reference.
"""

import logging
import uuid
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentResult:
    success: bool
    reference: str = ''


def charge(order) -> PaymentResult:
    reference = f"sim_{uuid.uuid4().hex}"
    logger.info("Simulated payment of %s for order %s: %s", order.total_amount, order.pk, reference)
    return PaymentResult(success=True, reference=reference)
