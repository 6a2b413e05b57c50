from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, override_settings
from datetime import date, datetime
from decimal import Decimal
import warnings

from .amortization import (
    AmortizationResult,
    PaymentScheduleEntry,
    add_months,
    amortize,
    compute_monthly_payment,
    compute_total_interest,
    generate_payment_schedule,
    schedule_total,
)
from .exceptions import AmortizationError, InvalidInputError, NotFiniteError


class MonthlyPaymentScenarioTest(SimpleTestCase):
    """Reference values for the payment calculation"""

    def test_one_percent_monthly_over_a_year(self):
        self.assertEqual(compute_monthly_payment(1_000_000, 12, 12), Decimal('88849'))

    def test_zero_rate_divides_principal_evenly(self):
        self.assertEqual(compute_monthly_payment(1_000_000, 0, 10), Decimal('100000'))

    def test_total_interest_matches_payment_times_term(self):
        payment = compute_monthly_payment(2_000_000, 9, 24)
        interest = compute_total_interest(2_000_000, 9, 24)

        self.assertGreater(interest, 0)
        self.assertEqual(interest, payment * 24 - 2_000_000)

    def test_zero_term_is_rejected(self):
        with self.assertRaises(InvalidInputError):
            compute_monthly_payment(100, 10, 0)

    def test_two_decimal_places(self):
        self.assertEqual(
            compute_monthly_payment(1_000_000, 12, 12, decimal_places=2),
            Decimal('88848.79')
        )

    @override_settings(LOAN_CURRENCY_DECIMAL_PLACES=2)
    def test_precision_defaults_to_setting(self):
        self.assertEqual(compute_monthly_payment(1_000_000, 12, 12), Decimal('88848.79'))

    def test_uneven_zero_rate_rounds_up(self):
        # 100 / 3 rounded half up would repay only 99
        payment = compute_monthly_payment(100, 0, 3)

        self.assertEqual(payment, Decimal('34'))
        self.assertEqual(compute_total_interest(100, 0, 3), Decimal('2'))

    def test_accepts_decimal_and_string_inputs(self):
        expected = compute_monthly_payment(1_000_000, 12, 12)

        self.assertEqual(compute_monthly_payment(Decimal('1000000'), Decimal('12'), 12), expected)
        self.assertEqual(compute_monthly_payment('1000000', '12.0', 12), expected)

    def test_amortize_returns_consistent_summary(self):
        result = amortize(1_000_000, 12, 12)

        self.assertIsInstance(result, AmortizationResult)
        self.assertEqual(result.monthly_payment, Decimal('88849'))
        self.assertEqual(result.total_repayment, Decimal('1066188'))
        self.assertEqual(result.total_interest, Decimal('66188'))
        self.assertEqual(result.as_dict()['term_months'], 12)


class InvalidInputTest(SimpleTestCase):

    def test_invalid_inputs_are_rejected(self):
        cases = [
            (0, 10, 12),
            (-500, 10, 12),
            (1000, -1, 12),
            (1000, 10, -3),
            (1000, 10, 12.0),
            (1000, 10, True),
            (True, 10, 12),
            (None, 10, 12),
            ('abc', 10, 12),
            (float('nan'), 10, 12),
            (1000, float('inf'), 12),
        ]
        for principal, rate, term in cases:
            with self.subTest(principal=principal, rate=rate, term=term):
                with self.assertRaises(InvalidInputError) as ctx:
                    compute_monthly_payment(principal, rate, term)
                self.assertEqual(ctx.exception.code, 'invalid_input')

    def test_negative_decimal_places_rejected(self):
        with self.assertRaises(InvalidInputError):
            compute_monthly_payment(1000, 10, 12, decimal_places=-1)

    def test_errors_are_validation_errors(self):
        self.assertTrue(issubclass(InvalidInputError, AmortizationError))
        self.assertTrue(issubclass(NotFiniteError, AmortizationError))
        self.assertTrue(issubclass(AmortizationError, ValidationError))

    def test_overflowing_growth_factor_is_not_finite(self):
        with self.assertRaises(NotFiniteError) as ctx:
            compute_monthly_payment(1_000_000, 1200, 100_000)
        self.assertEqual(ctx.exception.code, 'not_finite')


class MonthlyPaymentPropertyTest(SimpleTestCase):
    """Properties checked over a fixed grid of loans"""

    principals = [1, 999, 100_000, 1_000_000, 7_654_321]
    rates = [0, Decimal('0.5'), 3, 7, 12, Decimal('24.99'), 60]
    terms = [1, 3, 7, 12, 36, 120]

    def test_zero_rate_repays_exactly_when_divisible(self):
        for principal in self.principals:
            for term in self.terms:
                if principal % term:
                    continue
                with self.subTest(principal=principal, term=term):
                    payment = compute_monthly_payment(principal, 0, term)
                    self.assertEqual(payment * term, principal)
                    self.assertEqual(compute_total_interest(principal, 0, term), 0)

    def test_total_interest_is_never_negative(self):
        for decimal_places in (0, 2):
            for principal in self.principals:
                for rate in self.rates:
                    for term in self.terms:
                        with self.subTest(principal=principal, rate=rate, term=term, dp=decimal_places):
                            interest = compute_total_interest(principal, rate, term, decimal_places)
                            self.assertGreaterEqual(interest, 0)

    def test_payment_grows_with_rate(self):
        for principal in self.principals:
            for term in self.terms:
                with self.subTest(principal=principal, term=term):
                    payments = [compute_monthly_payment(principal, rate, term) for rate in self.rates]
                    self.assertEqual(payments, sorted(payments))

    def test_tiny_positive_rates_behave_like_zero_rate(self):
        tiny_rates = [Decimal('1e-40'), Decimal('1e-15'), Decimal('1e-12'), Decimal('1e-9'), Decimal('1e-7')]
        interest_free = compute_monthly_payment(1200, 0, 12)

        with warnings.catch_warnings():
            warnings.simplefilter('error')
            for rate in tiny_rates:
                with self.subTest(rate=rate):
                    payment = compute_monthly_payment(1200, rate, 12)
                    self.assertEqual(payment, Decimal('100'))
                    self.assertGreaterEqual(payment, interest_free)
                    self.assertGreaterEqual(compute_total_interest(1200, rate, 12), 0)

    def test_single_month_repays_principal_plus_one_month_interest(self):
        for principal in self.principals:
            for rate in self.rates:
                with self.subTest(principal=principal, rate=rate):
                    expected = Decimal(principal) * (1 + Decimal(str(rate)) / 1200)
                    payment = compute_monthly_payment(principal, rate, 1, decimal_places=2)
                    self.assertLessEqual(abs(payment - expected), Decimal('0.01'))


class PaymentScheduleTest(SimpleTestCase):

    def test_six_month_schedule(self):
        schedule = generate_payment_schedule('loan-1', 600_000, 6, 6, date(2024, 1, 15))
        payment = compute_monthly_payment(600_000, 6, 6)

        self.assertEqual(len(schedule), 6)
        self.assertEqual(
            [entry.due_date for entry in schedule],
            [date(2024, month, 15) for month in range(2, 8)]
        )
        for entry in schedule:
            self.assertIsInstance(entry, PaymentScheduleEntry)
            self.assertEqual(entry.amount, payment)
            self.assertEqual(entry.status, 'pending')
            self.assertEqual(entry.loan_id, 'loan-1')
        self.assertEqual(schedule[0].id, 'loan-1-payment-1')
        self.assertEqual(schedule[-1].id, 'loan-1-payment-6')
        self.assertEqual([entry.sequence_number for entry in schedule], list(range(1, 7)))

    def test_month_end_clamps_without_drifting(self):
        schedule = generate_payment_schedule('loan-2', 300_000, 10, 4, date(2024, 1, 31))

        self.assertEqual(
            [entry.due_date for entry in schedule],
            [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30), date(2024, 5, 31)]
        )

    def test_non_leap_february(self):
        self.assertEqual(add_months(date(2023, 1, 29), 1), date(2023, 2, 28))

    def test_start_date_formats(self):
        from_string = generate_payment_schedule(7, 1000, 5, 2, '2024-03-10')
        from_datetime = generate_payment_schedule(7, 1000, 5, 2, datetime(2024, 3, 10, 18, 30))

        self.assertEqual(from_string, from_datetime)
        self.assertEqual(from_string[0].id, '7-payment-1')
        self.assertEqual(from_string[0].due_date, date(2024, 4, 10))

    def test_invalid_start_date(self):
        for start in ('2024-02-30', 'not a date', None, 20240101):
            with self.subTest(start=start):
                with self.assertRaises(InvalidInputError):
                    generate_payment_schedule('loan-3', 1000, 5, 2, start)

    def test_due_date_past_calendar_end(self):
        with self.assertRaises(InvalidInputError):
            generate_payment_schedule('loan-4', 1000, 5, 12, date(9999, 6, 1))

    def test_invalid_loan_terms_propagate(self):
        with self.assertRaises(InvalidInputError):
            generate_payment_schedule('loan-5', 1000, 5, 0, date(2024, 1, 1))

    def test_schedule_length_and_sum(self):
        for principal in (1, 50_000, 1_234_567):
            for rate in (0, 6, 18):
                for term in (1, 5, 24, 60):
                    with self.subTest(principal=principal, rate=rate, term=term):
                        schedule = generate_payment_schedule('grid', principal, rate, term, date(2025, 5, 31))
                        result = amortize(principal, rate, term)

                        self.assertEqual(len(schedule), term)
                        self.assertEqual(schedule_total(schedule), result.total_repayment)
                        self.assertTrue(all(
                            earlier.due_date < later.due_date
                            for earlier, later in zip(schedule, schedule[1:])
                        ))

    def test_entries_serialize_to_dict(self):
        entry = generate_payment_schedule('loan-6', 1200, 0, 1, date(2024, 1, 1))[0]

        self.assertEqual(entry.as_dict(), {
            'id': 'loan-6-payment-1',
            'loan_id': 'loan-6',
            'sequence_number': 1,
            'due_date': date(2024, 2, 1),
            'amount': Decimal('1200'),
            'status': 'pending',
        })
