import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import stripe

from tuition_api.core import config
from tuition_api.core.errors import BadInput, PaymentProcessorFailure

logger = logging.getLogger(__name__)

WHOLE_MINOR_UNIT = Decimal('1')


def to_minor_units(salary) -> int:
    """Convert a decimal salary into whole cents, rounding half up."""
    if salary is None or (isinstance(salary, str) and not salary.strip()):
        raise BadInput('Salary is required.')
    try:
        amount = Decimal(str(salary).strip())
    except InvalidOperation as exc:
        raise BadInput('Salary must be a number.') from exc
    if not amount.is_finite():
        raise BadInput('Salary must be a number.')

    minor_units = int((amount * 100).quantize(WHOLE_MINOR_UNIT, rounding=ROUND_HALF_UP))
    if minor_units <= 0:
        raise BadInput('Salary must be greater than zero.')
    return minor_units


def create_payment_intent(salary, currency: str | None = None, metadata: dict | None = None) -> str:
    """Request a charge handle from Stripe and return its client secret."""
    amount = to_minor_units(salary)
    stripe.api_key = config.STRIPE_SECRET_KEY

    try:
        intent = stripe.PaymentIntent.create(
            amount=amount,
            currency=(currency or config.PAYMENT_CURRENCY).lower(),
            payment_method_types=['card'],
            metadata=metadata or {},
        )
    except stripe.StripeError as exc:
        logger.exception('Stripe error creating payment intent for %s minor units', amount)
        raise PaymentProcessorFailure() from exc

    logger.info('Created payment intent %s for %s minor units', intent.id, amount)
    return intent.client_secret
