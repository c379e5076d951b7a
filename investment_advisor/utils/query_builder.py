# Role: Deterministic query text builder. derive_query() is recomputed from the form on every field edit;
# format_request_turn() wraps whatever query was submitted into the user's transcript turn.

from __future__ import annotations

import re

from investment_advisor.models.form_state import FormState

AMOUNT_PLACEHOLDER = "To be determined"


def derive_query(form: FormState) -> str:
    amount = form.investment_amount.strip() or AMOUNT_PLACEHOLDER
    lines = [
        f"Investment Plan Request for: {form.company_share.strip()}",
        f"Type of Share: {form.share_type.strip()}",
        f"Investment Strategy: {form.investment_type.strip()}",
        f"Duration: {form.investment_years.strip()} years",
        f"Risk Tolerance: {form.risk_appetite}",
        f"Investment Amount: {amount}",
    ]
    return "\n".join(lines)


def format_request_turn(query: str) -> str:
    # Key line: the fence must be longer than any backtick run in a hand-edited query.
    longest = max((len(run) for run in re.findall(r"`+", query)), default=0)
    fence = "`" * max(3, longest + 1)
    return f"**Investment Plan Request:**\n{fence}\n{query.strip()}\n{fence}"
