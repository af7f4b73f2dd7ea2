from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from django.utils import timezone

TRIAL_PERIOD_DAYS = 14

SUBSCRIPTION_TIERS = {
    'free': {
        'name': 'Free',
        'price': Decimal('0'),
        'currency': 'USD',
        'interval': 'month',
        'popular': False,
        'features': ['Basic features', 'Community support', 'Limited usage'],
        'limitations': ['Advanced features'],
    },
    'pro': {
        'name': 'Pro',
        'price': Decimal('19'),
        'currency': 'USD',
        'interval': 'month',
        'popular': True,
        'features': ['All basic features', 'Advanced features', 'Priority support', 'Higher usage limits'],
        'limitations': [],
    },
    'enterprise': {
        'name': 'Enterprise',
        'price': Decimal('99'),
        'currency': 'USD',
        'interval': 'month',
        'popular': False,
        'features': ['All pro features', 'Custom integrations', 'Dedicated support', 'Unlimited usage'],
        'limitations': [],
    },
}

CURRENCY_SYMBOLS = {'USD': '$', 'AUD': 'A$', 'EUR': '€', 'GBP': '£'}


def calculate_trial_end_date(start: datetime, days: int = TRIAL_PERIOD_DAYS) -> datetime:
    return start + timedelta(days=days)


def is_trial_expired(trial_end_date: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if trial_end_date is None:
        return False
    now = now or timezone.now()
    return now > trial_end_date


def format_price(price, currency: str = 'USD') -> str:
    """Whole amounts drop the cents: 19 -> "$19", 19.5 -> "$19.50"."""
    amount = Decimal(str(price))
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    if amount == amount.to_integral_value():
        return f"{symbol}{amount.to_integral_value():,}"
    return f"{symbol}{amount.quantize(Decimal('0.01')):,}"
