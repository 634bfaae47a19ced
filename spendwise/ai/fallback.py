"""
Rule-based insight text.

Used whenever no text-generation client is configured or a call fails. Output
depends only on the snapshot passed in, so the same snapshot always produces
the same text.
"""

from typing import Any, Dict, List, Optional

from spendwise.utils.reconciliation import percentage

# Month-over-month change (percent) treated as a real increase or decrease.
TREND_THRESHOLD = 10

CATEGORY_TIPS = {
    "Food": "Plan weekly meals and cook in batches to cut down on takeaway and impulse grocery runs.",
    "Travel": "Combine errands into fewer trips and compare public transport or carpooling for regular routes.",
    "Rent": "Review your lease terms before renewal and check whether shared housing would lower your costs.",
    "Shopping": "Apply a 24-hour rule before any non-essential purchase and unsubscribe from sale newsletters.",
    "Entertainment": "Rotate streaming subscriptions instead of paying for all of them at once.",
    "Healthcare": "Check which routine costs your insurance covers and prefer generic medicines where possible.",
    "Bills": "Audit recurring bills and subscriptions and cancel the ones you no longer use.",
    "Education": "Look for free or discounted course material and employer learning budgets before paying full price.",
    "Others": "Label miscellaneous expenses more precisely so they can be budgeted in a real category.",
}

GENERAL_TIPS = [
    "Track expenses daily so small purchases do not add up unnoticed.",
    "Set spending alerts for your top expense categories.",
    "Move a fixed amount into savings at the start of each month.",
    "Review budgets mid-month and adjust before limits are reached.",
    "Keep a buffer of about 10% of your monthly budget for unexpected costs.",
]


def _money(value: Any) -> str:
    return f"{float(value or 0):.2f}"


def _month_change(trend: List[Dict[str, Any]]) -> Optional[int]:
    """Percent change between the last two trend points, or None."""
    if len(trend) < 2:
        return None
    previous = float(trend[-2].get("total") or 0)
    latest = float(trend[-1].get("total") or 0)
    if previous <= 0:
        return None
    return percentage(latest - previous, previous)


def spending_insights(snapshot: Dict[str, Any]) -> str:
    raw = snapshot.get("raw") or {}
    category_totals = raw.get("categoryTotals") or []
    budget_status = raw.get("budgetStatus") or []
    monthly_trend = raw.get("monthlyTrend") or []

    lines = ["## Spending Pattern Analysis", ""]
    if category_totals:
        top = category_totals[0]
        lines.append(
            f"- Your highest spending category is {top['category']} with {_money(top['total'])} "
            f"({snapshot.get('topCategoryPercentage', 0)}% of this month's spending)"
        )
        if snapshot.get("secondCategory") and snapshot["secondCategory"] != "None":
            lines.append(f"- {snapshot['secondCategory']} is your second largest category")
        lines.append(f"- You have expenses across {len(category_totals)} different categories")
    else:
        lines.append("- No expenses recorded for this month yet")

    lines += ["", "## Budget Performance", ""]
    if budget_status:
        overspent = [b for b in budget_status if b.get("isOverspent")]
        if overspent:
            lines.append(f"- You have exceeded your budget in {len(overspent)} categories")
            for b in overspent:
                lines.append(f"  - {b['category']}: {_money(b['actual'])} / {_money(b['monthlyLimit'])}")
        else:
            lines.append("- You are staying within budget across all categories")
        if snapshot.get("overspentAmount"):
            lines.append(f"- Budgeted spending is {_money(snapshot['overspentAmount'])} over your total budget")
        else:
            lines.append(f"- {_money(snapshot.get('remainingAmount'))} of your total budget remains")
    else:
        lines.append("- No budgets set for this month")

    lines += [
        "",
        "## Optimization Suggestions",
        "",
        "1. Track daily expenses to identify unnecessary spending patterns",
        "2. Set spending alerts for your top expense categories",
        "3. Review and adjust budgets based on actual spending patterns",
    ]

    lines += ["", "## Future Predictions", ""]
    change = _month_change(monthly_trend)
    if change is None:
        lines.append("- Not enough monthly history to spot a trend yet")
    elif change > TREND_THRESHOLD:
        lines.append(f"- Your spending increased by {change}% last month. Monitor closely to avoid overspending.")
    elif change < -TREND_THRESHOLD:
        lines.append(f"- Your spending decreased by {abs(change)}% last month.")
    else:
        lines.append("- Your spending has been relatively stable. Maintain this consistency.")

    return "\n".join(lines) + "\n"


def saving_tips(snapshot: Dict[str, Any]) -> str:
    category_totals = snapshot.get("categoryTotals") or []
    budget_status = snapshot.get("budgetStatus") or []

    tips: List[str] = []
    covered = set()
    for b in budget_status:
        if float(b.get("actual") or 0) > float(b.get("monthlyLimit") or 0):
            covered.add(b["category"])
            tips.append(
                f"{b['category']} is over budget ({_money(b['actual'])} of {_money(b['monthlyLimit'])}). "
                f"{CATEGORY_TIPS.get(b['category'], GENERAL_TIPS[0])}"
            )

    for row in category_totals:
        if len(tips) >= 5:
            break
        if row["category"] in covered or row["category"] not in CATEGORY_TIPS:
            continue
        tips.append(CATEGORY_TIPS[row["category"]])
        covered.add(row["category"])

    for tip in GENERAL_TIPS:
        if len(tips) >= 5:
            break
        tips.append(tip)

    lines = ["## Personalized Saving Tips", ""]
    lines += [f"{number}. {tip}" for number, tip in enumerate(tips[:5], start=1)]
    return "\n".join(lines) + "\n"


def risk_prediction(snapshot: Dict[str, Any]) -> str:
    monthly_trend = snapshot.get("monthlyTrend") or []
    spending = {row["category"]: float(row.get("total") or 0) for row in snapshot.get("currentSpending") or []}
    budgets = snapshot.get("budgets") or []

    over = []
    near = []
    for b in budgets:
        limit = float(b.get("monthlyLimit") or 0)
        spent = spending.get(b["category"], 0.0)
        used = percentage(spent, limit)
        if spent > limit:
            over.append(b["category"])
        elif used >= 80:
            near.append(b["category"])

    change = _month_change(monthly_trend)
    if over:
        level = "High"
    elif near or (change is not None and change > TREND_THRESHOLD):
        level = "Medium"
    else:
        level = "Low"

    lines = ["## Overspending Risk Prediction", "", f"**Risk Level**: {level}", "", "**Analysis**:"]
    if over:
        lines.append(f"- Already over budget in: {', '.join(over)}")
    if near:
        lines.append(f"- Above 80% of budget in: {', '.join(near)}")
    if change is not None:
        lines.append(f"- Spending changed by {change}% between the last two months")
    if not budgets:
        lines.append("- No budgets are set for this month, so limits cannot be checked")
    if not over and not near and budgets:
        lines.append("- All budgeted categories are below 80% of their limits")

    lines += [
        "",
        "**Recommended Actions**:",
        "1. Set weekly spending limits for high-expense categories",
        "2. Review expenses mid-month to stay on track",
        "3. Build an emergency buffer of 10% in your budget",
    ]
    return "\n".join(lines) + "\n"
