"""POST /v1/offers/calculate - live offer calculator"""

import logging
from fastapi import APIRouter, HTTPException, Request

from mca_pipeline.api.v1.schemas import InstallmentSchema, OfferCalculationRequest, OfferCalculationResponse
from mca_pipeline.api.dependencies import get_request_id
from mca_pipeline.domain.exceptions import InvalidInputError
from mca_pipeline.domain.payments import (
    build_payment_schedule,
    calculate_iso_commission,
    calculate_iso_commission_rate,
    calculate_payments,
)
from mca_pipeline.infrastructure.observability.logging import log_offer_calculation
from mca_pipeline.infrastructure.observability.metrics import invalid_input_counter, offer_calculation_counter
from mca_pipeline.utils.formatters import format_currency

router = APIRouter()


@router.post("/offers/calculate", response_model=OfferCalculationResponse)
def calculate_offer(request_body: OfferCalculationRequest, request: Request):
    """
    Calculate payback, periodic payments and ISO commission for an offer.

    Amounts are returned unrounded for storage on the offer record, with
    whole-dollar display strings alongside.
    """
    request_id = get_request_id(request)

    try:
        payments = calculate_payments(
            request_body.amount,
            request_body.factor_rate,
            request_body.term_months,
            request_body.payment_frequency,
        )
        iso_commission = calculate_iso_commission(
            request_body.amount, request_body.buy_rate, request_body.factor_rate
        )
        iso_commission_rate = calculate_iso_commission_rate(request_body.buy_rate, request_body.factor_rate)

        installments = None
        if request_body.first_payment_date is not None:
            installments = [
                InstallmentSchema(due_date=inst.due_date, amount=inst.amount)
                for inst in build_payment_schedule(
                    request_body.amount,
                    request_body.factor_rate,
                    request_body.term_months,
                    request_body.payment_frequency,
                    request_body.first_payment_date,
                )
            ]
    except InvalidInputError as e:
        invalid_input_counter.labels(endpoint="offer_calculation").inc()
        logging.warning(f"Invalid offer input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    offer_calculation_counter.labels(frequency=request_body.payment_frequency.value).inc()
    log_offer_calculation(
        request_id,
        request_body.payment_frequency.value,
        request_body.amount,
        payments.total_payback,
    )

    return OfferCalculationResponse(
        total_payback=payments.total_payback,
        daily_payment=payments.daily_payment,
        weekly_payment=payments.weekly_payment,
        iso_commission=iso_commission,
        iso_commission_rate=iso_commission_rate,
        total_payback_display=format_currency(payments.total_payback),
        daily_payment_display=format_currency(payments.daily_payment),
        weekly_payment_display=format_currency(payments.weekly_payment),
        installments=installments,
    )
