from django.test import TestCase, SimpleTestCase
from decimal import Decimal

from .catalog import DEFAULT_PACKAGES, default_catalog
from .exceptions import InvalidInputError, PackageNotFound
from .repositories import DjangoLoanPackageRepository, InMemoryLoanPackageRepository, PackageTerms
from .services import quote_package
from .test_data_seeder import TestDataSeeder


def make_terms(**kwargs):
    defaults = {
        'id': 'pkg-1',
        'name': 'Starter',
        'category': 'entrepreneur',
        'min_amount': Decimal('100000'),
        'max_amount': Decimal('1000000'),
        'interest_rate': Decimal('12'),
        'duration_months': 12,
    }
    defaults.update(kwargs)
    return PackageTerms(**defaults)


class InMemoryRepositoryTest(SimpleTestCase):

    def setUp(self):
        self.repository = InMemoryLoanPackageRepository([
            make_terms(),
            make_terms(id='pkg-2', name='Harvest', category='agriculture'),
            make_terms(id=3, name='Clinic', category='healthcare'),
        ])

    def test_get_by_id(self):
        self.assertEqual(self.repository.get('pkg-2').name, 'Harvest')
        self.assertEqual(self.repository.get('3').name, 'Clinic')

    def test_unknown_package(self):
        with self.assertRaises(PackageNotFound) as ctx:
            self.repository.get('missing')
        self.assertEqual(ctx.exception.package_id, 'missing')

    def test_list_is_sorted_and_filterable(self):
        self.assertEqual(
            [p.category for p in self.repository.list()],
            ['agriculture', 'entrepreneur', 'healthcare']
        )
        self.assertEqual([p.name for p in self.repository.list('healthcare')], ['Clinic'])
        self.assertEqual(self.repository.list('housing'), [])

    def test_accepts_amount_bounds_are_inclusive(self):
        terms = make_terms()

        self.assertTrue(terms.accepts_amount(100000))
        self.assertTrue(terms.accepts_amount('1000000'))
        self.assertFalse(terms.accepts_amount(Decimal('99999.99')))
        self.assertFalse(terms.accepts_amount(1000001))


class DefaultCatalogTest(SimpleTestCase):

    def test_default_catalog_terms(self):
        catalog = default_catalog()
        expected = {
            'education': (7, 48),
            'entrepreneur': (9, 36),
            'agriculture': (8, 24),
            'healthcare': (6, 24),
            'housing': (10, 60),
            'emergency': (12, 12),
        }

        self.assertEqual(len(catalog.list()), 6)
        for category, (rate, months) in expected.items():
            with self.subTest(category=category):
                terms = catalog.list(category)[0]
                self.assertEqual(terms.interest_rate, rate)
                self.assertEqual(terms.duration_months, months)
                self.assertLessEqual(terms.min_amount, terms.max_amount)

    def test_catalog_keys_are_unique(self):
        keys = [entry['key'] for entry in DEFAULT_PACKAGES]
        self.assertEqual(len(keys), len(set(keys)))


class QuotePackageTest(SimpleTestCase):

    def setUp(self):
        self.repository = default_catalog()

    def test_quote_defaults_to_minimum_over_full_duration(self):
        terms, result = quote_package(self.repository, 'emg-001')

        self.assertEqual(terms.name, 'Emergency Relief Loan')
        self.assertEqual(result.principal, Decimal('100000'))
        self.assertEqual(result.term_months, 12)
        self.assertGreater(result.total_interest, 0)

    def test_quote_requested_amount(self):
        _, result = quote_package(self.repository, 'emg-001', amount='1000000', months='12')
        self.assertEqual(result.monthly_payment, Decimal('88849'))

    def test_quote_outside_package_limits(self):
        cases = [
            {'amount': '50000'},
            {'amount': '2000001'},
            {'amount': 'lots'},
            {'months': '13'},
            {'months': '0'},
            {'months': 'twelve'},
        ]
        for params in cases:
            with self.subTest(**params):
                with self.assertRaises(InvalidInputError):
                    quote_package(self.repository, 'emg-001', **params)

    def test_quote_unknown_package(self):
        with self.assertRaises(PackageNotFound):
            quote_package(self.repository, 'nope')


class DjangoRepositoryTest(TestCase):

    def setUp(self):
        self.seeder = TestDataSeeder()
        self.package = self.seeder.create_package(name='Seed Capital', category='entrepreneur')
        self.seeder.create_package(name='Village Clinic', category='healthcare')
        self.repository = DjangoLoanPackageRepository()

    def tearDown(self):
        self.seeder.cleanup_all()

    def test_get_returns_terms(self):
        terms = self.repository.get(self.package.id)

        self.assertEqual(terms.id, str(self.package.id))
        self.assertEqual(terms.name, 'Seed Capital')
        self.assertEqual(terms.interest_rate, Decimal('12'))

    def test_get_unknown_or_malformed_id(self):
        for package_id in (999999, 'abc', None):
            with self.subTest(package_id=package_id):
                with self.assertRaises(PackageNotFound):
                    self.repository.get(package_id)

    def test_list_filters_by_category(self):
        self.assertEqual(len(self.repository.list()), 2)
        self.assertEqual([t.name for t in self.repository.list('healthcare')], ['Village Clinic'])
