from fastapi import APIRouter, Depends

from diagnoease.constants import Access
from diagnoease.schemas import PaymentIntentIn, PaymentIntentOut
from diagnoease.security import require
from diagnoease.services import payment_service

router = APIRouter(tags=["payments"])


@router.post(
    "/create-payment-intent",
    response_model=PaymentIntentOut,
    dependencies=[Depends(require(Access.AUTHENTICATED))],
)
async def create_payment_intent(payload: PaymentIntentIn):
    client_secret = await payment_service.create_payment_intent(payload.price)
    return PaymentIntentOut(clientSecret=client_secret)
