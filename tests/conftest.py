"""Shared fixtures for the Frame Audit test suite.

Provides well-formed analysis and refusal payloads in the camelCase wire
shape, and a manually advanced clock for time-dependent components.
"""

import copy

import pytest

from core.providers.demo_provider import DEMO_ANALYSIS


class FakeClock:
    """Monotonic clock stand-in; advance with :meth:`tick`."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

def make_analysis(**overrides):
    """Return a valid analysis payload with levers, updated by *overrides*."""
    payload = copy.deepcopy(DEMO_ANALYSIS)
    payload["levers"] = {
        "changePoints": [
            {
                "description": "Cost-bearers have no seat where budgets are set",
                "leverType": "GOVERNANCE",
                "focus": "redesign",
                "impact": "high",
            },
            {
                "description": "Failure data is not visible to decision makers",
                "leverType": "INFORMATION",
                "focus": "prevention",
                "impact": "medium",
            },
        ]
    }
    payload.update(overrides)
    return payload


def make_refusal(**overrides):
    payload = {
        "refusalReason": "The question asks for a ranking of human worth.",
        "reframedQuestion": "What structures produce unequal outcomes between groups?",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def analysis_payload():
    return make_analysis()


@pytest.fixture
def refusal_payload():
    return make_refusal()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def analysis_factory():
    return make_analysis


@pytest.fixture
def refusal_factory():
    return make_refusal
