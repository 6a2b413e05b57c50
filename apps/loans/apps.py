from django.apps import AppConfig


class LoansConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.loans'
    label = 'loans'
    verbose_name = 'Loans'

    def ready(self):
        from . import checks, signals  # noqa: F401
