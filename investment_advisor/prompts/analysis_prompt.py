# Role: The single analysis prompt sent to the completion provider. Embeds the (possibly hand-edited) query
# and names the company explicitly so the market-position section is about the right share.

from __future__ import annotations

ANALYSIS_SECTIONS = [
    "Current market position of {company}",
    "Price evaluation (high/low compared to sector average)",
    "Risk vs reward analysis",
    "Recommended portfolio allocation",
    "5-year historical performance",
    "Alternative investment options",
    "Tax optimization strategies",
]

CLOSING_INSTRUCTION = (
    "Conclude with a summary and a recommendation on whether this is a suitable investment."
)


def build_analysis_prompt(derived_query: str, company_share: str) -> str:
    company = company_share.strip()
    numbered = "\n".join(
        f"{i}. {section.format(company=company)}" for i, section in enumerate(ANALYSIS_SECTIONS, start=1)
    )
    return (
        "As a financial expert, analyze this investment plan:\n"
        f"{derived_query.strip()}\n\n"
        "Provide a detailed response with:\n"
        f"{numbered}\n\n"
        f"{CLOSING_INSTRUCTION}"
    )
