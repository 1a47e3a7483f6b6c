"""
Calculator page state and command handlers

Each handler takes the current PageState and returns the next one, plus an
effect for the caller to carry out where one is needed.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union

from checkout import CheckoutError
from roi_calculator import CalculationResult, MeetingInputs, ROICalculator, RawValue

logger = logging.getLogger(__name__)

CHECKOUT_FAILED_MESSAGE = 'Failed to start checkout. Please try again.'

calculator = ROICalculator()


@dataclass(frozen=True)
class PageState:
    inputs: MeetingInputs = field(default_factory=MeetingInputs)
    calculations: Optional[CalculationResult] = None
    has_access: bool = False
    loading: bool = False


@dataclass(frozen=True)
class CheckoutRequest:
    price_id: str


@dataclass(frozen=True)
class Navigate:
    url: str


@dataclass(frozen=True)
class Alert:
    message: str


Effect = Union[CheckoutRequest, Navigate, Alert]


def initial_state(has_access: bool = False) -> PageState:
    return PageState(inputs=MeetingInputs(), has_access=has_access)


def edit_input(state: PageState, name: str, raw: RawValue) -> PageState:
    """Apply one field edit; `name` is the camelCase field name"""
    if name not in MeetingInputs.FIELD_NAMES:
        raise KeyError(f"Unknown input field: {name}")
    attr = MeetingInputs.FIELD_NAMES[name]
    value = calculator.coerce_field(attr, raw)
    return replace(state, inputs=replace(state.inputs, **{attr: value}))


def calculate(state: PageState) -> PageState:
    return replace(state, calculations=calculator.calculate(state.inputs, state.has_access))


def begin_checkout(state: PageState, price_id: str) -> Tuple[PageState, Optional[Effect]]:
    """Enter the loading state; ignored while a checkout is already in flight"""
    if state.loading or state.has_access:
        return state, None
    return replace(state, loading=True), CheckoutRequest(price_id)


def complete_checkout(state: PageState,
                      url: Optional[str] = None,
                      error: Optional[str] = None) -> Tuple[PageState, Effect]:
    """Leave the loading state and either navigate away or alert the user"""
    state = replace(state, loading=False)
    if error is None and url:
        return state, Navigate(url)
    return state, Alert(CHECKOUT_FAILED_MESSAGE)


def run_checkout(state: PageState, client, price_id: str) -> Tuple[PageState, Optional[Effect]]:
    """begin_checkout, perform the request, then complete_checkout"""
    state, effect = begin_checkout(state, price_id)
    if effect is None:
        return state, None

    logger.info("Starting checkout for price %s", price_id)
    try:
        url = client.create_session(effect.price_id)
    except CheckoutError as e:
        logger.warning("Checkout error: %s", e)
        return complete_checkout(state, error=str(e))
    return complete_checkout(state, url=url)
