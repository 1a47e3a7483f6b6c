import pytest

from access_gate import AccessState, MemoryAccessStore
from app import app as flask_app
from checkout import CheckoutError


class FakeCheckoutClient:
    """Records requested prices; returns `url` or raises `error`"""

    def __init__(self, url="https://checkout.example.com/pay/cs_test_123", error=None):
        self.url = url
        self.error = error
        self.calls = []

    def create_session(self, price_id):
        self.calls.append(price_id)
        if self.error is not None:
            raise CheckoutError(self.error)
        return self.url


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True, STRIPE_PRICE_ID="price_test_29")
    yield flask_app
    flask_app.extensions.pop("checkout_client", None)
    flask_app.extensions.pop("stripe_checkout_client", None)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def unlocked_client(client):
    with client.session_transaction() as sess:
        sess["roiCalculatorAccess"] = "true"
    return client


@pytest.fixture
def memory_access():
    return AccessState(MemoryAccessStore())


@pytest.fixture
def fake_checkout():
    return FakeCheckoutClient()


@pytest.fixture
def failing_checkout():
    return FakeCheckoutClient(error="card declined")
