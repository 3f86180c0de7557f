"""Installment previews and card issuer lookup"""

from fastapi import APIRouter

from ledger_gateway.api.v1.schemas import CardIssuersResponse, QuoteRequest, QuoteResponse
from ledger_gateway.config import settings
from ledger_gateway.domain.installments import build_schedule
from ledger_gateway.domain.rates import supported_card_issuers

router = APIRouter()


@router.get("/card-issuers", response_model=CardIssuersResponse)
def list_card_issuers():
    return CardIssuersResponse(issuers=supported_card_issuers())


@router.post("/installments/quote", response_model=QuoteResponse)
def quote_installments(request_body: QuoteRequest):
    """
    Preview an installment schedule without saving anything.

    Returns:
        Resolved APR, estimated total fee and the per-month breakdown
    """
    schedule = build_schedule(
        request_body.amount,
        request_body.installment_months,
        request_body.purchase_date,
        request_body.card_issuer,
        request_body.estimation or settings.fee_estimation_strategy,
    )
    return QuoteResponse.from_schedule(schedule)
