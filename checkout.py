"""
Checkout session clients
Requests a hosted payment page URL for the one-time unlock purchase
"""

import logging
from typing import Mapping, Optional

import requests
import stripe

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    """Checkout could not be started"""


class HttpCheckoutClient:
    """
    Client for a checkout-session endpoint

    POST {"priceId": ...} -> {"url": ...}. No timeout and no retry: a hung
    endpoint keeps the caller waiting.
    """

    def __init__(self, endpoint: str, http=None, timeout: Optional[float] = None):
        self.endpoint = endpoint
        self.http = http or requests.Session()
        self.timeout = timeout

    def create_session(self, price_id: str) -> str:
        try:
            response = self.http.post(
                self.endpoint,
                json={'priceId': price_id},
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout,
            )
            data = response.json()
        except requests.RequestException as e:
            raise CheckoutError(f"Checkout request failed: {e}") from e
        except ValueError as e:
            raise CheckoutError("Checkout endpoint returned invalid JSON") from e

        url = data.get('url') if isinstance(data, dict) else None
        if not url:
            raise CheckoutError("Checkout endpoint returned no redirect URL")
        return url


class StripeCheckoutClient:
    """Creates Stripe Checkout Sessions for a single one-time price"""

    def __init__(self, api_key: str, app_domain: str):
        self.api_key = api_key
        self.app_domain = app_domain.rstrip('/')

    @property
    def success_url(self) -> str:
        # Stripe fills in the placeholder; the page unlocks on seeing session_id
        return f"{self.app_domain}/?session_id={{CHECKOUT_SESSION_ID}}"

    @property
    def cancel_url(self) -> str:
        return f"{self.app_domain}/"

    def create_session(self, price_id: str) -> str:
        if not self.api_key:
            raise CheckoutError("Stripe not configured (set STRIPE_SECRET_KEY)")
        if not price_id:
            raise CheckoutError("No price configured (set STRIPE_PRICE_ID)")

        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode='payment',
                payment_method_types=['card'],
                line_items=[{'price': price_id, 'quantity': 1}],
                success_url=self.success_url,
                cancel_url=self.cancel_url,
            )
        except stripe.StripeError as e:
            raise CheckoutError(str(e)) from e

        url = getattr(session, 'url', None)
        if not url:
            raise CheckoutError("Stripe returned no checkout URL")
        logger.info("Created Stripe checkout session %s", session.id)
        return url


def build_checkout_client(config: Mapping):
    """HTTP client when CHECKOUT_ENDPOINT is configured, otherwise Stripe directly"""
    endpoint = config.get('CHECKOUT_ENDPOINT')
    if endpoint:
        return HttpCheckoutClient(endpoint)
    return StripeCheckoutClient(
        api_key=config.get('STRIPE_SECRET_KEY', ''),
        app_domain=config.get('APP_DOMAIN', 'http://localhost:8080'),
    )
