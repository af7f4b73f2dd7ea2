"""Report which deployment environment variables are configured."""
from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnvironmentVariable:
    key: str
    required: bool
    description: str
    value: str = 'missing'


REQUIRED_ENV_VARS = (
    EnvironmentVariable('DATABASE_URL', True, 'Database connection string'),
    EnvironmentVariable('STRIPE_SECRET_KEY', True, 'Stripe secret key for payment processing'),
    EnvironmentVariable('STRIPE_PUBLIC_KEY', True, 'Stripe publishable key for client-side'),
    EnvironmentVariable('CLAUDE_API_KEY', False, 'Claude API key for AI assistance'),
)


def validate_environment(environ: Optional[Mapping[str, str]] = None) -> dict:
    """
    Return the configured/missing state of every known variable.

    Values are never echoed back, only "configured" or "missing".
    Summary status is "complete" when every variable is set, else "partial".
    """
    environ = os.environ if environ is None else environ

    variables = []
    for var in REQUIRED_ENV_VARS:
        state = 'configured' if environ.get(var.key) else 'missing'
        variables.append(EnvironmentVariable(var.key, var.required, var.description, state))

    configured = sum(1 for v in variables if v.value == 'configured')
    total = len(variables)
    missing_required = [v.key for v in variables if v.required and v.value == 'missing']
    if missing_required:
        logger.warning("Missing required environment variables: %s", ", ".join(missing_required))

    return {
        'variables': [asdict(v) for v in variables],
        'summary': {
            'total': total,
            'configured': configured,
            'status': 'complete' if configured == total else 'partial',
        },
    }
