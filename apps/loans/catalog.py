"""Default loan package catalog loaded by ``seed_loan_packages``"""
from decimal import Decimal

from .repositories import InMemoryLoanPackageRepository, PackageTerms

DEFAULT_PACKAGES = [
    {
        'key': 'edu-001',
        'name': 'Education Loan',
        'category': 'education',
        'description': 'Fund your education and skills development. Perfect for tuition, courses, and vocational training.',
        'min_amount': Decimal('500000'),
        'max_amount': Decimal('5000000'),
        'interest_rate': Decimal('7'),
        'duration_months': 48,
        'disbursement_days': 7,
        'requirements': [
            'Valid national ID',
            'Proof of enrollment or admission letter',
            'Co-signer for amounts > 2M',
            'Bank statement (3 months)',
        ],
        'features': [
            'Grace period up to 6 months',
            'Flexible repayment terms',
            'Educational institution verification',
            'Zero penalty for early repayment',
        ],
        'documents': [
            'Application form',
            'National ID copy',
            'Admission/enrollment letter',
            'Previous academic records',
            'Income verification',
        ],
    },
    {
        'key': 'ent-001',
        'name': 'Entrepreneur Startup Loan',
        'category': 'entrepreneur',
        'description': 'Launch or expand your business. Ideal for small businesses, trading, and manufacturing.',
        'min_amount': Decimal('1000000'),
        'max_amount': Decimal('10000000'),
        'interest_rate': Decimal('9'),
        'duration_months': 36,
        'disbursement_days': 5,
        'requirements': [
            'Business registration certificate',
            'National ID',
            'Bank statement (6 months)',
            'Business plan',
            'Collateral (movable or immovable)',
        ],
        'features': [
            'Business mentoring support',
            'Monthly check-ins with loan officer',
            'Flexible business-based repayment',
            'Access to YEF business network',
            'Insurance coverage included',
        ],
        'documents': [
            'Application form',
            'Business registration',
            'National ID copy',
            'Bank statements',
            'Business plan and financial projections',
            'Tax identification number',
        ],
    },
    {
        'key': 'agr-001',
        'name': 'Agriculture & Farming Loan',
        'category': 'agriculture',
        'description': 'Grow your agricultural business. For farming inputs, equipment, and land development.',
        'min_amount': Decimal('500000'),
        'max_amount': Decimal('8000000'),
        'interest_rate': Decimal('8'),
        'duration_months': 24,
        'disbursement_days': 10,
        'requirements': [
            'Land ownership/lease documents',
            'National ID',
            'Farming experience (minimum 1 year)',
            'Bank statement',
            'Harvest schedule',
        ],
        'features': [
            'Seasonal disbursement options',
            'Agricultural extension officer support',
            'Post-harvest financing available',
            'Crop insurance included',
            'Market linkage assistance',
        ],
        'documents': [
            'Application form',
            'Land documents (title deed/lease)',
            'National ID copy',
            'Farming records/certificates',
            'Bank statements',
            'Crop and harvest schedule',
        ],
    },
    {
        'key': 'hea-001',
        'name': 'Healthcare & Wellness Loan',
        'category': 'healthcare',
        'description': 'Medical services and health-related investments. For medical bills, equipment, and health businesses.',
        'min_amount': Decimal('500000'),
        'max_amount': Decimal('5000000'),
        'interest_rate': Decimal('6'),
        'duration_months': 24,
        'disbursement_days': 3,
        'requirements': [
            'Medical quotation/invoice',
            'National ID',
            'Health professional recommendation',
            'Income verification',
        ],
        'features': [
            'Express processing for emergencies',
            'Medical verification included',
            'Health insurance coordination',
            'Doctor consultation support',
        ],
        'documents': [
            'Application form',
            'Medical quotation/prescription',
            'National ID copy',
            'Proof of employment/income',
            'Doctor recommendation letter',
        ],
    },
    {
        'key': 'hou-001',
        'name': 'Housing & Property Loan',
        'category': 'housing',
        'description': 'Build or improve your home. For construction, renovation, and property development.',
        'min_amount': Decimal('2000000'),
        'max_amount': Decimal('20000000'),
        'interest_rate': Decimal('10'),
        'duration_months': 60,
        'disbursement_days': 14,
        'requirements': [
            'Land ownership documents',
            'Architect/engineer plans',
            'National ID',
            'Income proof (18+ months)',
            'Property valuation',
        ],
        'features': [
            'Long-term repayment (up to 5 years)',
            'Construction milestones-based disbursement',
            'Property insurance included',
            'Free property valuation',
        ],
        'documents': [
            'Application form',
            'Land title/ownership documents',
            'Building plans',
            'National ID copy',
            'Income verification documents',
            'Property valuation report',
        ],
    },
    {
        'key': 'emg-001',
        'name': 'Emergency Relief Loan',
        'category': 'emergency',
        'description': 'Quick cash for unexpected emergencies. Fast approval and disbursement.',
        'min_amount': Decimal('100000'),
        'max_amount': Decimal('2000000'),
        'interest_rate': Decimal('12'),
        'duration_months': 12,
        'disbursement_days': 1,
        'requirements': [
            'National ID',
            'Valid phone number',
            'One character reference',
            'Income proof',
        ],
        'features': [
            'Same-day approval possible',
            'Minimal documentation',
            'SMS and email updates',
            'Flexible payment options',
        ],
        'documents': [
            'Application form',
            'National ID copy',
            'Income verification',
            'Character reference letter',
        ],
    },
]


def package_fields(entry):
    """Model fields of a catalog entry, without the catalog key"""
    return {k: v for k, v in entry.items() if k != 'key'}


def default_catalog():
    """The default packages as an in-memory repository keyed by catalog key"""
    return InMemoryLoanPackageRepository(
        PackageTerms(
            id=entry['key'],
            name=entry['name'],
            category=entry['category'],
            min_amount=entry['min_amount'],
            max_amount=entry['max_amount'],
            interest_rate=entry['interest_rate'],
            duration_months=entry['duration_months'],
        )
        for entry in DEFAULT_PACKAGES
    )
