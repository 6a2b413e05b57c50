from django.core.exceptions import ValidationError


class AmortizationError(ValidationError):
    """Base error for loan amortization calculations.

    Subclasses ``ValidationError`` so serializers and views that already
    handle validation failures treat calculator errors the same way.
    """
    default_code = 'invalid'

    def __init__(self, message, code=None, params=None):
        super().__init__(message, code=code or self.default_code, params=params)


class InvalidInputError(AmortizationError):
    """Raised when principal, rate, term or start date violate their constraints"""
    default_code = 'invalid_input'


class NotFiniteError(AmortizationError):
    """Raised when the payment formula overflows or produces NaN"""
    default_code = 'not_finite'


class PackageNotFound(LookupError):
    """Raised by package repositories for an unknown package id"""

    def __init__(self, package_id):
        super().__init__(f"Loan package {package_id} not found")
        self.package_id = package_id
