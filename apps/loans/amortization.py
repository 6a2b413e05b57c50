"""Fixed-payment loan amortization.

Pure calculations shared by the package catalog (estimated monthly payment),
the application intake (loan summary snapshot) and repayment tracking
(expected schedule). Nothing here touches the database.

The monthly payment follows the standard annuity formula:

    payment = P * r * (1 + r)^n / ((1 + r)^n - 1)

where ``P`` is the principal, ``r`` the monthly rate (annual percent / 100 / 12)
and ``n`` the term in months. An interest-free loan pays ``P / n``.

Payments are rounded half up to ``LOAN_CURRENCY_DECIMAL_PLACES`` minor digits
(0 = whole currency units). When half-up rounding would leave
``payment * n`` below the principal, the payment is rounded up instead, so
total interest is never negative.

Schedules are flat: every entry carries the same amount.
"""
import math
from dataclasses import dataclass, asdict
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP, ROUND_CEILING, InvalidOperation, localcontext
from typing import List

import numpy as np
import numpy_financial as npf
from dateutil.relativedelta import relativedelta
from django.conf import settings

from .exceptions import InvalidInputError, NotFiniteError

STATUS_PENDING = 'pending'
STATUS_PAID = 'paid'
STATUS_OVERDUE = 'overdue'

SCHEDULE_STATUS_CHOICES = [
    (STATUS_PENDING, 'Pending'),
    (STATUS_PAID, 'Paid'),
    (STATUS_OVERDUE, 'Overdue'),
]


@dataclass(frozen=True)
class AmortizationResult:
    principal: Decimal
    annual_rate_percent: Decimal
    term_months: int
    monthly_payment: Decimal
    total_repayment: Decimal
    total_interest: Decimal

    def as_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class PaymentScheduleEntry:
    """One expected repayment. ``id`` is ``<loan_id>-payment-<n>``."""
    id: str
    loan_id: str
    sequence_number: int
    due_date: date
    amount: Decimal
    status: str = STATUS_PENDING

    def as_dict(self):
        return asdict(self)


def _to_decimal(value, name):
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, str)):
        raise InvalidInputError(f"{name} must be a number")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidInputError(f"{name} must be a number")
    if not result.is_finite():
        raise InvalidInputError(f"{name} must be finite")
    return result


def _validate_inputs(principal, annual_rate_percent, term_months):
    principal = _to_decimal(principal, 'Principal')
    if principal <= 0:
        raise InvalidInputError("Principal must be greater than 0")

    rate = _to_decimal(annual_rate_percent, 'Annual rate')
    if rate < 0:
        raise InvalidInputError("Annual rate cannot be negative")

    if isinstance(term_months, bool) or not isinstance(term_months, int):
        raise InvalidInputError("Term must be a whole number of months")
    if term_months < 1:
        raise InvalidInputError("Term must be at least 1 month")

    return principal, rate, term_months


def _quantum(decimal_places):
    if decimal_places is None:
        decimal_places = getattr(settings, 'LOAN_CURRENCY_DECIMAL_PLACES', 0)
    if isinstance(decimal_places, bool) or not isinstance(decimal_places, int) or decimal_places < 0:
        raise InvalidInputError("Decimal places must be a non-negative integer")
    return Decimal(1).scaleb(-decimal_places)


# Below this monthly rate ``1 + r`` carries too few significant bits in a float
FLOAT_RATE_FLOOR = Decimal('1e-6')


def _decimal_annuity_payment(principal, monthly_rate, term_months):
    with localcontext() as ctx:
        ctx.prec = 60
        growth = (1 + monthly_rate) ** term_months
        if growth == 1:
            payment = principal / Decimal(term_months)
        else:
            payment = principal * monthly_rate * growth / (growth - 1)
    return +payment


def _annuity_payment(principal, monthly_rate, term_months):
    """Unrounded annuity payment as a Decimal"""
    if monthly_rate == 0:
        return principal / Decimal(term_months)
    if monthly_rate < FLOAT_RATE_FLOOR:
        return _decimal_annuity_payment(principal, monthly_rate, term_months)

    rate = float(monthly_rate)
    try:
        with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
            growth = np.power(1.0 + rate, term_months)
            pmt = float(npf.pmt(rate, term_months, -float(principal)))
    except OverflowError as e:
        raise NotFiniteError(f"Payment calculation overflowed: {e}") from e

    if not math.isfinite(growth):
        raise NotFiniteError(
            "Payment is not a finite number; term or rate is too large"
        )
    if not math.isfinite(pmt):
        return _decimal_annuity_payment(principal, monthly_rate, term_months)
    return Decimal(repr(pmt))


def compute_monthly_payment(principal, annual_rate_percent, term_months, decimal_places=None):
    """Return the fixed monthly payment for an amortizing loan.

    Args:
        principal: Amount borrowed, > 0
        annual_rate_percent: Nominal annual rate in percent, >= 0
        term_months: Number of monthly payments, >= 1
        decimal_places: Rounding precision; defaults to
            ``settings.LOAN_CURRENCY_DECIMAL_PLACES``

    Raises:
        InvalidInputError: If any input violates its constraint
        NotFiniteError: If the formula overflows for extreme inputs
    """
    principal, rate, term_months = _validate_inputs(principal, annual_rate_percent, term_months)
    quantum = _quantum(decimal_places)

    monthly_rate = rate / Decimal(100) / Decimal(12)
    raw = _annuity_payment(principal, monthly_rate, term_months)

    try:
        payment = raw.quantize(quantum, rounding=ROUND_HALF_UP)
        if payment * term_months < principal:
            floor_share = max(raw, principal / Decimal(term_months))
            payment = floor_share.quantize(quantum, rounding=ROUND_CEILING)
    except InvalidOperation as e:
        raise NotFiniteError("Payment is too large to represent at the configured precision") from e
    return payment


def compute_total_interest(principal, annual_rate_percent, term_months, decimal_places=None):
    """Return ``monthly_payment * term_months - principal``"""
    payment = compute_monthly_payment(principal, annual_rate_percent, term_months, decimal_places)
    return payment * term_months - _to_decimal(principal, 'Principal')


def amortize(principal, annual_rate_percent, term_months, decimal_places=None) -> AmortizationResult:
    """Compute payment, total repayment and total interest in one pass"""
    payment = compute_monthly_payment(principal, annual_rate_percent, term_months, decimal_places)
    principal = _to_decimal(principal, 'Principal')
    total_repayment = payment * term_months
    return AmortizationResult(
        principal=principal,
        annual_rate_percent=_to_decimal(annual_rate_percent, 'Annual rate'),
        term_months=term_months,
        monthly_payment=payment,
        total_repayment=total_repayment,
        total_interest=total_repayment - principal,
    )


def parse_start_date(value) -> date:
    """Accept a date, a datetime or an ISO ``YYYY-MM-DD`` string"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise InvalidInputError(f"Invalid start date: {value}")
    raise InvalidInputError("Start date must be a calendar date")


def add_months(start: date, months: int) -> date:
    """Advance ``start`` by calendar months, clamping to the month's last day.

    2024-01-31 + 1 month -> 2024-02-29.
    """
    try:
        return start + relativedelta(months=months)
    except (ValueError, OverflowError):
        raise InvalidInputError(
            f"Due date {months} months after {start} is outside the supported calendar"
        )


def generate_payment_schedule(loan_id, principal, annual_rate_percent, term_months, start_date,
                              decimal_places=None) -> List[PaymentScheduleEntry]:
    """Build the flat repayment schedule for a loan.

    Entry ``i`` (1-indexed) is due ``i`` calendar months after ``start_date``,
    each offset computed from ``start_date`` so day clamping never drifts.
    Every entry has the same amount and starts as ``pending``.
    """
    start = parse_start_date(start_date)
    payment = compute_monthly_payment(principal, annual_rate_percent, term_months, decimal_places)

    # Fail before building anything if the last due date is out of range
    add_months(start, term_months)

    loan_id = str(loan_id)
    return [
        PaymentScheduleEntry(
            id=f"{loan_id}-payment-{i}",
            loan_id=loan_id,
            sequence_number=i,
            due_date=add_months(start, i),
            amount=payment,
        )
        for i in range(1, term_months + 1)
    ]


def schedule_total(entries: List[PaymentScheduleEntry]) -> Decimal:
    return sum((entry.amount for entry in entries), Decimal('0'))
