"""Read-only sources of loan package terms.

Quote and intake code receives a repository instead of querying
``LoanPackage`` directly, so it can be exercised against fixture terms.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from .exceptions import PackageNotFound


@dataclass(frozen=True)
class PackageTerms:
    id: str
    name: str
    category: str
    min_amount: Decimal
    max_amount: Decimal
    interest_rate: Decimal
    duration_months: int

    def accepts_amount(self, amount) -> bool:
        return self.min_amount <= Decimal(str(amount)) <= self.max_amount


class LoanPackageRepository:
    """Interface for package catalogs"""

    def get(self, package_id) -> PackageTerms:
        raise NotImplementedError

    def list(self, category: Optional[str] = None) -> List[PackageTerms]:
        raise NotImplementedError


class InMemoryLoanPackageRepository(LoanPackageRepository):
    def __init__(self, packages: Iterable[PackageTerms] = ()):
        self._packages: Dict[str, PackageTerms] = {str(p.id): p for p in packages}

    def get(self, package_id) -> PackageTerms:
        try:
            return self._packages[str(package_id)]
        except KeyError:
            raise PackageNotFound(package_id)

    def list(self, category=None):
        packages = sorted(self._packages.values(), key=lambda p: (p.category, p.name))
        if category:
            packages = [p for p in packages if p.category == category]
        return packages


class DjangoLoanPackageRepository(LoanPackageRepository):
    """Reads terms from ``LoanPackage`` rows"""

    def _queryset(self):
        from .models import LoanPackage
        return LoanPackage.objects.all()

    def get(self, package_id) -> PackageTerms:
        from .models import LoanPackage
        try:
            package = self._queryset().get(pk=package_id)
        except (LoanPackage.DoesNotExist, ValueError, TypeError):
            raise PackageNotFound(package_id)
        return package.to_terms()

    def list(self, category=None):
        queryset = self._queryset()
        if category:
            queryset = queryset.filter(category=category)
        return [package.to_terms() for package in queryset]
