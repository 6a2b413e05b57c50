"""
Test Data Seeder for Loans App Tests

Creates consistent applicants, packages, applications and disbursed loans
that the loans, analytics and task tests share.
"""

from django.contrib.auth import get_user_model
from django.utils import timezone
from decimal import Decimal
from datetime import date
from typing import Dict
import logging

from .models import LoanPackage, LoanApplication, RepaymentInstallment, Payment
from .services import submit_application, transition_application, disburse_application

User = get_user_model()
logger = logging.getLogger(__name__)


class TestDataSeeder:
    """
    Test data seeder for loan tests.

    Provides methods to create:
    - Applicants and administrators
    - Loan packages
    - Applications at any point of their lifecycle
    """
    __test__ = False

    def __init__(self):
        self.created_users = []
        self.created_packages = []
        self.created_applications = []
        self._seed_counter = 0

    def get_unique_identifier(self) -> str:
        """Get a unique identifier for test data"""
        self._seed_counter += 1
        return f"test_{self._seed_counter}_{timezone.now().strftime('%H%M%S%f')}"

    def create_applicant(self, **kwargs) -> User:
        unique_id = self.get_unique_identifier()
        defaults = {
            'username': f'applicant_{unique_id}',
            'email': f'applicant_{unique_id}@test.com',
            'password': 'testpass123',
            'name': 'Test Applicant',
            'role': User.ROLE_USER,
        }
        defaults.update(kwargs)

        user = User.objects.create_user(**defaults)
        self.created_users.append(user)
        logger.debug(f"Created applicant: {user.email}")
        return user

    def create_admin(self, **kwargs) -> User:
        unique_id = self.get_unique_identifier()
        defaults = {
            'username': f'admin_{unique_id}',
            'email': f'admin_{unique_id}@test.com',
            'password': 'testpass123',
            'name': 'Test Admin',
            'role': User.ROLE_ADMIN,
        }
        defaults.update(kwargs)

        user = User.objects.create_user(**defaults)
        self.created_users.append(user)
        logger.debug(f"Created admin: {user.email}")
        return user

    def create_package(self, **kwargs) -> LoanPackage:
        """
        Create a loan package; defaults to a 12% / 12 month package
        lending 100,000 - 2,000,000
        """
        defaults = {
            'name': f'Package {self.get_unique_identifier()}',
            'description': 'Test package',
            'category': 'emergency',
            'min_amount': Decimal('100000'),
            'max_amount': Decimal('2000000'),
            'interest_rate': Decimal('12'),
            'duration_months': 12,
        }
        defaults.update(kwargs)

        package = LoanPackage.objects.create(**defaults)
        self.created_packages.append(package)
        return package

    def create_application(self, applicant: User = None, package: LoanPackage = None,
                           amount=Decimal('1000000'), repayment_months=12, **kwargs) -> LoanApplication:
        """Submit an application through the intake service so the snapshot is filled"""
        applicant = applicant or self.create_applicant()
        package = package or self.create_package()
        defaults = {
            'purpose': 'Working capital',
            'monthly_income': Decimal('800000'),
        }
        defaults.update(kwargs)

        application = submit_application(applicant, package, Decimal(amount), repayment_months, **defaults)
        self.created_applications.append(application)
        return application

    def create_approved_application(self, **kwargs) -> LoanApplication:
        application = self.create_application(**kwargs)
        return transition_application(application, LoanApplication.STATUS_APPROVED)

    def create_disbursed_application(self, start_date: date = None, **kwargs) -> LoanApplication:
        """Approve and disburse an application, persisting its schedule"""
        application = self.create_approved_application(**kwargs)
        application = disburse_application(application, start_date=start_date)
        application.refresh_from_db()
        return application

    def create_scenario(self) -> Dict:
        """
        Two applicants with one disbursed loan each plus an administrator
        """
        admin = self.create_admin()
        package = self.create_package()
        applicant = self.create_applicant()
        other_applicant = self.create_applicant()

        return {
            'admin': admin,
            'package': package,
            'applicant': applicant,
            'other_applicant': other_applicant,
            'application': self.create_disbursed_application(applicant=applicant, package=package),
            'other_application': self.create_disbursed_application(applicant=other_applicant, package=package),
        }

    def cleanup_all(self):
        """
        Remove everything this seeder created, children first
        """
        application_ids = [a.id for a in self.created_applications if a.id]
        if application_ids:
            Payment.objects.filter(application_id__in=application_ids).delete()
            RepaymentInstallment.objects.filter(application_id__in=application_ids).delete()
            LoanApplication.objects.filter(id__in=application_ids).delete()

        package_ids = [p.id for p in self.created_packages if p.id]
        if package_ids:
            LoanPackage.objects.filter(id__in=package_ids).delete()

        user_ids = [u.id for u in self.created_users if u.id]
        if user_ids:
            User.objects.filter(id__in=user_ids).delete()

        self.created_applications.clear()
        self.created_packages.clear()
        self.created_users.clear()
        self._seed_counter = 0
        logger.debug("Test data cleanup completed")


class BaseTestWithSeeder:
    """
    Mixin giving a test case a seeder and automatic cleanup

    Override ``seed_test_data`` to build the data a test class needs.
    """

    def setUp(self):
        super().setUp()
        self.seeder = TestDataSeeder()
        self.seed_test_data()

    def tearDown(self):
        self.seeder.cleanup_all()
        super().tearDown()

    def seed_test_data(self):
        pass
