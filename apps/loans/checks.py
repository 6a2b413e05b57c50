from django.conf import settings
from django.core.checks import Error, register

from .models import MONEY_DECIMAL_PLACES


@register()
def check_currency_precision(app_configs=None, **kwargs):
    """
    Computed payments are persisted on the schedule, so they must fit the
    scale of the money columns or the stored totals stop adding up
    """
    decimal_places = getattr(settings, 'LOAN_CURRENCY_DECIMAL_PLACES', 0)
    if isinstance(decimal_places, bool) or not isinstance(decimal_places, int) \
            or not 0 <= decimal_places <= MONEY_DECIMAL_PLACES:
        return [
            Error(
                f"LOAN_CURRENCY_DECIMAL_PLACES must be an integer between 0 and "
                f"{MONEY_DECIMAL_PLACES}, got {decimal_places!r}",
                hint="Stored amounts keep at most two minor digits.",
                id='loans.E001',
            )
        ]
    return []
