"""Shared test fixtures for the Investment Advisor test suite."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from investment_advisor.core.session_controller import SessionController
from investment_advisor.llm.gemini_client import GeminiClient
from investment_advisor.models.form_state import FormState

SAMPLE_ANALYSIS = (
    "## TCS Analysis\n\n"
    "TCS holds a leading position in Indian IT services.\n\n"
    "```python\nallocation = {'TCS': 0.2, 'Index': 0.8}\n```\n\n"
    "**Recommendation:** suitable for a medium-risk growth portfolio."
)


@pytest.fixture
def tcs_fields() -> dict[str, str]:
    return {
        "company_share": "TCS",
        "share_type": "Stocks",
        "investment_type": "Growth",
        "investment_years": "5",
        "risk_appetite": "medium",
        "investment_amount": "",
    }


@pytest.fixture
def tcs_form(tcs_fields) -> FormState:
    return FormState(**tcs_fields)


@pytest.fixture
def sample_analysis() -> str:
    return SAMPLE_ANALYSIS


@pytest.fixture
def mock_client(sample_analysis) -> MagicMock:
    client = MagicMock(spec=GeminiClient)
    client.generate_text.return_value = sample_analysis
    return client


@pytest.fixture
def controller(mock_client) -> SessionController:
    return SessionController(client=mock_client)


@pytest.fixture
def filled_controller(controller, tcs_fields) -> SessionController:
    for name, value in tcs_fields.items():
        controller.update_field(name, value)
    return controller
