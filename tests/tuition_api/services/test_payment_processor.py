from decimal import Decimal
from types import SimpleNamespace

import pytest
import stripe

from tuition_api.core.errors import BadInput, PaymentProcessorFailure
from tuition_api.services import payment_processor


@pytest.mark.parametrize(
    ('salary', 'expected'),
    [
        (5000, 500000),
        ('12.34', 1234),
        (Decimal('10.005'), 1001),
        (Decimal('10.004'), 1000),
        (0.1, 10),
        ('0.005', 1),
    ],
)
def test_to_minor_units_rounds_to_nearest_cent(salary, expected: int) -> None:
    assert payment_processor.to_minor_units(salary) == expected


@pytest.mark.parametrize('salary', [None, '', '   ', 0, '0', '-5', '0.004', 'abc', 'NaN', 'Infinity'])
def test_to_minor_units_rejects_missing_or_non_positive_salary(salary) -> None:
    with pytest.raises(BadInput):
        payment_processor.to_minor_units(salary)


def test_create_payment_intent_sends_cents_and_returns_client_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = {}

    def fake_create(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(id='pi_123', client_secret='pi_123_secret_abc')

    monkeypatch.setattr(stripe.PaymentIntent, 'create', fake_create)

    client_secret = payment_processor.create_payment_intent('49.99', metadata={'tuition_id': 'abc'})

    assert client_secret == 'pi_123_secret_abc'
    assert captured['amount'] == 4999
    assert captured['currency'] == 'usd'
    assert captured['metadata'] == {'tuition_id': 'abc'}


def test_create_payment_intent_rejects_zero_salary_before_calling_stripe(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail_create(**kwargs):
        raise AssertionError('Stripe should not be called')

    monkeypatch.setattr(stripe.PaymentIntent, 'create', fail_create)

    with pytest.raises(BadInput):
        payment_processor.create_payment_intent(0)


def test_create_payment_intent_maps_stripe_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_create(**kwargs):
        raise stripe.APIConnectionError('network down')

    monkeypatch.setattr(stripe.PaymentIntent, 'create', failing_create)

    with pytest.raises(PaymentProcessorFailure) as exception_info:
        payment_processor.create_payment_intent(100)

    assert exception_info.value.status_code == 502
