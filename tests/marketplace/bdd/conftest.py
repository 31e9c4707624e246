"""Shared BDD fixtures and step definitions for the Marketplace."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import then

from marketplace.exceptions import AuthorizationError


@pytest.fixture()
def error():
    """Container for captured errors."""
    return {"exc": None}


@then("the action fails with a validation error")
def action_fails_validation(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then("the action is not authorized")
def action_not_authorized(error):
    assert isinstance(error["exc"], AuthorizationError)
