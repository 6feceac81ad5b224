"""Plain-text financial profile narrative for advisors and LLM prompts"""

from typing import List

from cerebral_finance.domain.models import FinancialProfile
from cerebral_finance.utils.formatting import format_currency

TITLE = "COMPREHENSIVE FINANCIAL PROFILE FOR ADVISOR ANALYSIS"

EXECUTIVE_SUMMARY = "EXECUTIVE SUMMARY"
ASSET_BREAKDOWN = "ASSET BREAKDOWN"
LIABILITY_BREAKDOWN = "LIABILITY BREAKDOWN"
CASH_FLOW_ANALYSIS = "CASH FLOW ANALYSIS"
GOALS_AND_OBJECTIVES = "GOALS & OBJECTIVES"
RECOMMENDATIONS = "RECOMMENDATIONS"

SECTION_ORDER = (
    EXECUTIVE_SUMMARY,
    ASSET_BREAKDOWN,
    LIABILITY_BREAKDOWN,
    CASH_FLOW_ANALYSIS,
    GOALS_AND_OBJECTIVES,
    RECOMMENDATIONS,
)


def _cash_flow_section(profile: FinancialProfile) -> str:
    text = profile.cash_flow.description
    if profile.cash_flow.expense_breakdown:
        lines = [
            f"- {category}: {format_currency(amount)}/month"
            for category, amount in profile.cash_flow.expense_breakdown.items()
        ]
        text += "\n\nEXPENSE BREAKDOWN:\n" + "\n".join(lines)
    return text


def _recommendations_section(profile: FinancialProfile) -> str:
    if not profile.recommendations:
        return "No recommendations at this time."
    return "\n".join(f"{index}. {rec}" for index, rec in enumerate(profile.recommendations, start=1))


def render_narrative(profile: FinancialProfile) -> str:
    """
    Render the profile as a six-section text document.

    Sections always appear in SECTION_ORDER, each header followed by its
    body and a blank line.
    """
    bodies = {
        EXECUTIVE_SUMMARY: f"Financial Profile Summary: {profile.summary}",
        ASSET_BREAKDOWN: profile.assets.description,
        LIABILITY_BREAKDOWN: profile.liabilities.description,
        CASH_FLOW_ANALYSIS: _cash_flow_section(profile),
        GOALS_AND_OBJECTIVES: profile.goals.description,
        RECOMMENDATIONS: _recommendations_section(profile),
    }

    parts: List[str] = [TITLE, ""]
    for header in SECTION_ORDER:
        parts.extend([header, bodies[header], ""])

    return "\n".join(parts)
