"""Offer payment calculations - payback, periodic debits and ISO commission"""

import math
from datetime import date, timedelta
from typing import List, Optional

from mca_pipeline.domain.exceptions import InvalidInputError
from mca_pipeline.domain.models import Installment, PaymentCalculation, PaymentFrequency
from mca_pipeline.utils.date_utils import generate_business_days
from mca_pipeline.utils.numbers import require_finite

BUSINESS_DAYS_PER_MONTH = 22
BUSINESS_DAYS_PER_WEEK = 5
WEEKS_PER_MONTH = 4.33


def _parse_frequency(frequency: object) -> PaymentFrequency:
    try:
        return PaymentFrequency(frequency)
    except ValueError:
        raise InvalidInputError(f"payment_frequency must be 'daily' or 'weekly', got {frequency!r}") from None


def _payment_count(term_months: float, frequency: PaymentFrequency) -> int:
    if frequency is PaymentFrequency.DAILY:
        return math.ceil(term_months * BUSINESS_DAYS_PER_MONTH)
    return math.ceil(term_months * WEEKS_PER_MONTH)


def calculate_payments(
    amount: float,
    factor_rate: float,
    term_months: float,
    frequency: PaymentFrequency | str,
) -> PaymentCalculation:
    """
    Calculate payback and periodic payments for an offer.

    Daily: 22 business days per month, weekly payment is five daily payments.
    Weekly: ceil(term * 4.33) weeks, daily payment is the weekly payment
    spread over five business days (display only).

    Results keep full precision; rounding belongs to the display layer.

    Example:
        $100,000 at 1.25 over 12 months, daily
        → total $125,000, 264 debits of ~$473.48, ~$2,367.42 per week

    Raises:
        InvalidInputError: non-finite inputs, negative amount,
            non-positive factor rate or term, unknown frequency
    """
    amount = require_finite("amount", amount)
    factor_rate = require_finite("factor_rate", factor_rate)
    term_months = require_finite("term_months", term_months)
    frequency = _parse_frequency(frequency)

    if amount < 0:
        raise InvalidInputError(f"amount must not be negative, got {amount}")
    if factor_rate <= 0:
        raise InvalidInputError(f"factor_rate must be positive, got {factor_rate}")
    if term_months <= 0:
        raise InvalidInputError(f"term_months must be positive, got {term_months}")

    total_payback = amount * factor_rate

    if frequency is PaymentFrequency.DAILY:
        total_days = term_months * BUSINESS_DAYS_PER_MONTH
        daily_payment = total_payback / total_days
        weekly_payment = daily_payment * BUSINESS_DAYS_PER_WEEK
    else:
        total_weeks = math.ceil(term_months * WEEKS_PER_MONTH)
        weekly_payment = total_payback / total_weeks
        daily_payment = weekly_payment / BUSINESS_DAYS_PER_WEEK

    for name, value in (
        ("total_payback", total_payback),
        ("daily_payment", daily_payment),
        ("weekly_payment", weekly_payment),
    ):
        if not math.isfinite(value):
            raise InvalidInputError(f"{name} is not finite for these inputs")

    return PaymentCalculation(
        total_payback=total_payback,
        daily_payment=daily_payment,
        weekly_payment=weekly_payment,
    )


def calculate_iso_commission(
    amount: float,
    buy_rate: Optional[float] = None,
    factor_rate: Optional[float] = None,
) -> float:
    """
    ISO commission: the spread between the quoted factor rate and the buy rate.

    Returns 0 when either rate is missing or zero. A buy rate above the factor
    rate yields a negative commission; callers are expected to prevent that.
    """
    if not buy_rate or not factor_rate:
        return 0.0
    amount = require_finite("amount", amount)
    return amount * calculate_iso_commission_rate(buy_rate, factor_rate)


def calculate_iso_commission_rate(
    buy_rate: Optional[float] = None,
    factor_rate: Optional[float] = None,
) -> float:
    """Commission rate stored on the offer (factor rate minus buy rate)"""
    if not buy_rate or not factor_rate:
        return 0.0
    return require_finite("factor_rate", factor_rate) - require_finite("buy_rate", buy_rate)


def build_payment_schedule(
    amount: float,
    factor_rate: float,
    term_months: float,
    frequency: PaymentFrequency | str,
    start_date: date,
) -> List[Installment]:
    """
    Generate the dated debit schedule for an offer.

    Daily debits fall on business days starting at start_date (or the next
    business day); weekly debits are 7 days apart. The last installment
    absorbs floating-point remainder so the schedule sums to total payback.

    Daily schedules use ceil(term * 22) debits so fractional terms are covered.

    Args:
        amount: Funded amount
        factor_rate: Payback multiplier
        term_months: Offer term
        frequency: 'daily' or 'weekly'
        start_date: First debit date

    Returns:
        List of Installment objects in due-date order
    """
    calculation = calculate_payments(amount, factor_rate, term_months, frequency)
    frequency = _parse_frequency(frequency)
    count = _payment_count(term_months, frequency)

    if frequency is PaymentFrequency.DAILY:
        due_dates = generate_business_days(start_date, count)
        payment = calculation.daily_payment
    else:
        due_dates = [start_date + timedelta(weeks=i) for i in range(count)]
        payment = calculation.weekly_payment

    installments = []
    for i, due_date in enumerate(due_dates):
        # Last installment absorbs remainder to ensure exact total
        if i == count - 1:
            installment_amount = calculation.total_payback - payment * (count - 1)
        else:
            installment_amount = payment
        installments.append(Installment(due_date=due_date, amount=installment_amount))

    return installments
