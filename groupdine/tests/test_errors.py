from __future__ import annotations

import pytest

from groupdine import errors
from groupdine.errors import USER_MESSAGES, ErrorCode, RecommendationError


def _error_classes():
    return [
        obj for obj in vars(errors).values()
        if isinstance(obj, type) and issubclass(obj, RecommendationError) and obj is not RecommendationError
    ]


def test_every_code_has_a_user_message():
    assert set(USER_MESSAGES) == set(ErrorCode)
    assert all(USER_MESSAGES.values())


@pytest.mark.parametrize("cls", _error_classes(), ids=lambda c: c.__name__)
def test_error_defaults_to_user_message(cls):
    exc = cls("internal detail: stack at 0xdeadbeef")
    assert exc.user_message == USER_MESSAGES[cls.code]
    assert "0xdeadbeef" not in exc.user_message
    assert str(exc) == "internal detail: stack at 0xdeadbeef"


def test_error_codes_are_distinct():
    codes = [cls.code for cls in _error_classes()]
    assert len(codes) == len(set(codes))


def test_retryable_classification():
    assert errors.APILimitError.retryable
    assert errors.AITimeoutError.retryable
    assert errors.SearchFailedError.retryable
    assert not errors.InvalidLocationError.retryable
    assert not errors.NoQualifiedRestaurantsError.retryable
    assert not errors.ValidationError.retryable


def test_error_carries_retry_after_and_context():
    exc = errors.APILimitError("429", retry_after=30, context={"endpoint": "searchText"})
    assert exc.retry_after == 30
    assert exc.context == {"endpoint": "searchText"}
    assert errors.CacheError("x").context == {}


def test_custom_user_message_wins():
    assert errors.NoResultsError("none", user_message="別の駅でお試しください").user_message == "別の駅でお試しください"
