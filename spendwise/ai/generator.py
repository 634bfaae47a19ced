import json
import logging
from typing import Any, Callable, Dict, List, Optional

from spendwise.ai import fallback
from spendwise.ai.client import TextGenerationClient
from spendwise.models.analytics import CategoryTotal, MonthlyTrendPoint, TopCategory
from spendwise.models.budget import BudgetRollup
from spendwise.models.insight import MAX_RESPONSE_LENGTH
from spendwise.utils.reconciliation import percentage

logger = logging.getLogger(__name__)

INSIGHTS_SYSTEM_PROMPT = """You are a financial assistant integrated into an expense tracking application.

You will receive structured expense analysis data calculated by the backend.
Your task is to generate clear, concise, and user-friendly financial insights.
Do NOT perform calculations. Only explain and recommend based on the data provided."""

TIPS_SYSTEM_PROMPT = "You are a financial advisor providing practical saving tips."

RISK_SYSTEM_PROMPT = "You are a financial risk analyst predicting spending risks."


def build_spending_snapshot(
    month: str,
    category_totals: List[CategoryTotal],
    monthly_trend: List[MonthlyTrendPoint],
    top_categories: List[TopCategory],
    rollup: BudgetRollup,
) -> Dict[str, Any]:
    """
    Numbers handed to the generator for the monthly spending insight.

    ``totalSpent`` counts every category so ``topCategoryPercentage`` is the top
    category's share of the month; ``overspentAmount``/``remainingAmount`` come
    from the budgeted categories only.
    """
    total_spent = round(sum(row.total for row in category_totals), 2)
    top = category_totals[0] if category_totals else None
    second = category_totals[1] if len(category_totals) > 1 else None

    return {
        "budget": rollup.total_monthly_budget,
        "totalSpent": total_spent,
        "overspentAmount": rollup.overspent_amount,
        "remainingAmount": rollup.remaining_amount,
        "topCategory": top.category if top else "None",
        "topCategoryPercentage": percentage(top.total, total_spent) if top else 0,
        "secondCategory": second.category if second else "None",
        "raw": {
            "categoryTotals": [row.to_dict() for row in category_totals],
            "monthlyTrend": [point.to_dict() for point in monthly_trend],
            "budgetStatus": [status.to_dict() for status in rollup.budgets],
            "topCategories": [row.to_dict() for row in top_categories],
        },
        "month": month,
    }


class InsightGenerator:
    """
    Turns numeric snapshots into text.

    With no client every call uses the rule-based templates. With a client,
    any failure of the call falls back to the same templates, so callers
    always get text back.
    """

    def __init__(self, client: Optional[TextGenerationClient] = None):
        self.client = client

    def spending_insights(self, snapshot: Dict[str, Any]) -> str:
        user_prompt = f"""User Expense Summary:
- Monthly Budget: {snapshot['budget']}
- Total Spent This Month: {snapshot['totalSpent']}
- Overspent Amount: {snapshot['overspentAmount']}
- Remaining Amount: {snapshot['remainingAmount']}
- Top Spending Category: {snapshot['topCategory']}
- Percentage Spent on Top Category: {snapshot['topCategoryPercentage']}%
- Second Highest Category (if any): {snapshot['secondCategory']}

Instructions:
1. Clearly mention if the user has exceeded the budget.
2. Identify the main reason for overspending using category data.
3. Give 1-2 practical, realistic recommendations.
4. Keep the tone supportive and simple.
5. Limit the response to 4-6 sentences.
6. Do NOT use emojis.
7. Do NOT include headings.

Generate the AI insight text now."""
        return self._generate(
            "spending insights",
            INSIGHTS_SYSTEM_PROMPT,
            user_prompt,
            temperature=0.7,
            max_tokens=300,
            rule_based=lambda: fallback.spending_insights(snapshot),
        )

    def saving_tips(self, snapshot: Dict[str, Any]) -> str:
        user_prompt = f"""Based on the following spending data, provide 5 personalized money-saving tips:

Category Spending: {json.dumps(snapshot.get('categoryTotals', []), indent=2)}
Budget Status: {json.dumps(snapshot.get('budgetStatus', []), indent=2)}

Requirements:
- Tips should be specific to the categories where user spends most
- Be practical and actionable
- Keep each tip to 1-2 sentences
- Format as a numbered list"""
        return self._generate(
            "saving tips",
            TIPS_SYSTEM_PROMPT,
            user_prompt,
            temperature=0.8,
            max_tokens=500,
            rule_based=lambda: fallback.saving_tips(snapshot),
        )

    def risk_prediction(self, snapshot: Dict[str, Any]) -> str:
        user_prompt = f"""Analyze spending trends and predict overspending risk:

Monthly Trend: {json.dumps(snapshot.get('monthlyTrend', []), indent=2)}
Current Month Spending: {json.dumps(snapshot.get('currentSpending', []), indent=2)}
Budgets: {json.dumps(snapshot.get('budgets', []), indent=2)}

Provide:
1. Overall risk level (Low/Medium/High)
2. Categories at risk
3. Specific warning signs you notice
4. Recommended preventive actions

Keep response concise and clear."""
        return self._generate(
            "risk prediction",
            RISK_SYSTEM_PROMPT,
            user_prompt,
            temperature=0.6,
            max_tokens=400,
            rule_based=lambda: fallback.risk_prediction(snapshot),
        )

    def _generate(
        self,
        kind: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
        rule_based: Callable[[], str],
    ) -> str:
        text = None
        if self.client is not None:
            try:
                text = self.client.complete(system_prompt, user_prompt, temperature, max_tokens)
            except Exception as e:
                logger.warning(f"Text generation for {kind} failed, using rule-based text: {e}")
            else:
                if not isinstance(text, str) or not text.strip():
                    logger.warning(f"Text generation for {kind} returned no text, using rule-based text")
                    text = None

        if text is None:
            text = rule_based()
        return text[:MAX_RESPONSE_LENGTH]
