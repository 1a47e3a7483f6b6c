"""
Application configuration
Environment variables (or a .env file) override defaults
"""

import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'meeting-roi-calculator-dev')

    # Stripe
    STRIPE_SECRET_KEY = os.environ.get('STRIPE_SECRET_KEY', '')
    STRIPE_PRICE_ID = os.environ.get('STRIPE_PRICE_ID', '')
    APP_DOMAIN = os.environ.get('APP_DOMAIN', 'http://localhost:8080')

    # External checkout-session endpoint; Stripe is called directly when unset
    CHECKOUT_ENDPOINT = os.environ.get('CHECKOUT_ENDPOINT', '')

    UNLOCK_PRICE_LABEL = os.environ.get('UNLOCK_PRICE_LABEL', '$29')

    # Unlock flag lives in the session cookie
    ACCESS_LIFETIME_DAYS = int(os.environ.get('ACCESS_LIFETIME_DAYS', '365'))
    PERMANENT_SESSION_LIFETIME = timedelta(days=ACCESS_LIFETIME_DAYS)
