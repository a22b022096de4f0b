"""Tests for configuration constants and helpers."""

import pytest

from autodash import config
from autodash.config import get_max_candidates, is_ga_dimension


def test_get_max_candidates_default():
    """None resolves to the configured cap."""
    assert get_max_candidates() == config.MAX_CANDIDATES_PER_CARD
    assert get_max_candidates(None) == 250


def test_get_max_candidates_override():
    assert get_max_candidates(5) == 5


@pytest.mark.parametrize("value", [0, -1, 2.5, "10", True])
def test_get_max_candidates_invalid(value):
    with pytest.raises(ValueError, match="Invalid candidate cap"):
        get_max_candidates(value)


def test_get_max_candidates_disabled(monkeypatch):
    monkeypatch.setattr(config, "MAX_CANDIDATES_PER_CARD", None)
    assert get_max_candidates() is None


def test_is_ga_dimension():
    assert is_ga_dimension("ga:country")
    assert not is_ga_dimension("type/Country")
    assert not is_ga_dimension(None)
