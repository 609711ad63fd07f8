import math

import stripe
from fastapi import HTTPException
from starlette.concurrency import run_in_threadpool

from diagnoease.config import get_settings
from diagnoease.utils.logger import get_logger

settings = get_settings()
logger = get_logger("payment_service")


def to_minor_units(price: float) -> int:
    """Major currency units to the provider's minor units (dollars -> cents)."""
    return int(round(price * 100))


async def create_payment_intent(price: float) -> str:
    """Create a Stripe PaymentIntent and return its client secret."""
    if not math.isfinite(price) or to_minor_units(price) < 1:
        raise HTTPException(status_code=400, detail="Invalid price")
    if not settings.STRIPE_SECRET_KEY:
        raise HTTPException(status_code=503, detail="Payments are not configured")

    amount = to_minor_units(price)
    try:
        # The SDK is blocking; keep it off the event loop
        intent = await run_in_threadpool(
            stripe.PaymentIntent.create,
            amount=amount,
            currency=settings.PAYMENT_CURRENCY,
            automatic_payment_methods={"enabled": True},
            api_key=settings.STRIPE_SECRET_KEY,
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe PaymentIntent failed for amount={amount}: {e}")
        raise HTTPException(status_code=502, detail="Payment provider error")
    logger.info(f"PaymentIntent {intent.id} created for amount={amount} {settings.PAYMENT_CURRENCY}")
    return intent.client_secret
