"""
Summary Models

Results of the monthly aggregation shown on the dashboard.
"""

from pydantic import BaseModel, Field, computed_field


class ProgressRatios(BaseModel):
    """
    Split of the income/expense progress bar.

    Both ratios are in [0, 1]. Both are 0 when nothing was recorded.
    """

    income_ratio: float = Field(ge=0.0, le=1.0)
    expense_ratio: float = Field(ge=0.0, le=1.0)

    @classmethod
    def from_totals(cls, income_total: float, expense_total: float) -> "ProgressRatios":
        """
        Derive the ratios from monthly totals.

        - income > 0: expense share of income, capped at 1
        - no income but expenses: the bar is all expense
        - neither: both 0
        """
        if income_total > 0:
            expense_ratio = min(expense_total / income_total, 1.0)
            return cls(income_ratio=1.0 - expense_ratio, expense_ratio=expense_ratio)
        if expense_total > 0:
            return cls(income_ratio=0.0, expense_ratio=1.0)
        return cls(income_ratio=0.0, expense_ratio=0.0)

    @property
    def spent_percentage(self) -> float:
        """Share of income spent, as shown under the bar."""
        return self.expense_ratio * 100


class MonthlySummary(BaseModel):
    """
    Income, expense and balance for one calendar month.

    All totals are expressed in `currency`.
    """

    year: int
    month: int = Field(ge=1, le=12)
    currency: str

    income_total: float = 0.0
    expense_total: float = 0.0

    income_count: int = Field(default=0, ge=0)
    expense_count: int = Field(default=0, ge=0)
    skipped_count: int = Field(
        default=0,
        ge=0,
        description="Records in the month whose amount could not be parsed"
    )

    @computed_field
    @property
    def balance(self) -> float:
        return self.income_total - self.expense_total

    @property
    def ratios(self) -> ProgressRatios:
        return ProgressRatios.from_totals(self.income_total, self.expense_total)

    @property
    def overspent_by(self) -> float:
        """How far expenses exceed income (0 when they do not)."""
        return max(self.expense_total - self.income_total, 0.0)
