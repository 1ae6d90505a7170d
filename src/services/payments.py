"""Payment verification against the Flutterwave transactions API."""

import logging
from typing import Optional

import httpx

from src.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# References accepted without a gateway call outside production
MOCK_REFERENCE_PREFIX = "mock-"
TRIAL_REFERENCE = "TRIAL"


def is_bypass_reference(reference: str, settings: Settings) -> bool:
    """Development and trial references skip the gateway, except in production."""
    if settings.is_production:
        return False
    return reference.startswith(MOCK_REFERENCE_PREFIX) or reference == TRIAL_REFERENCE


async def verify_payment(
    transaction_reference: str,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> bool:
    """
    Confirm a transaction with the payment gateway.

    Returns True only when the gateway answers 2xx with ``status ==
    "success"`` and ``data.status == "successful"``. Every other outcome,
    including network errors, timeouts and malformed bodies, returns False;
    this function never raises.
    """
    try:
        settings = settings or get_settings()
        if is_bypass_reference(transaction_reference, settings):
            logger.info(f"Payment reference {transaction_reference} accepted without verification")
            return True

        if not settings.flutterwave_secret_key:
            logger.error("Missing FLUTTERWAVE_SECRET_KEY")
            return False

        url = f"{settings.payment_gateway_url.rstrip('/')}/transactions/{transaction_reference}/verify"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {settings.flutterwave_secret_key}",
        }

        if client is None:
            async with httpx.AsyncClient(timeout=settings.payment_timeout_seconds) as own_client:
                response = await own_client.get(url, headers=headers)
        else:
            response = await client.get(url, headers=headers, timeout=settings.payment_timeout_seconds)

        if not response.is_success:
            logger.warning(
                f"Payment gateway returned {response.status_code} for {transaction_reference}"
            )
            return False

        payload = response.json()
        verified = (
            payload.get("status") == "success"
            and (payload.get("data") or {}).get("status") == "successful"
        )
        if not verified:
            logger.warning(f"Payment {transaction_reference} not successful")
        return verified

    except Exception as e:
        logger.error(f"Payment verification failed for {transaction_reference}: {e}")
        return False
