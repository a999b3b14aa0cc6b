"""
Insight Generator

Turns field analyses and the detected business pattern into an ordered
list of human-readable findings.
"""

from typing import Callable, Mapping, Optional

from api.schemas.responses import (
    BusinessPattern,
    FieldAnalysis,
    FieldType,
    Insight,
    InsightPriority,
    InsightType,
)
from config import AnalyzerSettings, get_settings
from core.values import format_number, to_fixed


PRIORITY_ORDER = {
    InsightPriority.HIGH: 0,
    InsightPriority.MEDIUM: 1,
    InsightPriority.LOW: 2,
}


def _plural(count: int, singular: str, plural: Optional[str] = None) -> str:
    if count == 1:
        return singular
    return plural or f"{singular}s"


def _find_by_name(analyses: Mapping[str, FieldAnalysis], *fragments: str) -> Optional[str]:
    """First field whose lowercased name contains any fragment."""
    for name in analyses:
        lower = name.lower()
        if any(fragment in lower for fragment in fragments):
            return name
    return None


def _find_by_type(analyses: Mapping[str, FieldAnalysis], field_type: FieldType) -> Optional[str]:
    for name, analysis in analyses.items():
        if analysis.type == field_type:
            return name
    return None


class InsightGenerator:
    """
    Rule-based insight generator.

    Emits a data quality finding, pattern-specific facts and identifier
    duplicate checks, then orders them by priority.
    """

    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or get_settings().analyzer
        self.pattern_handlers: dict[
            BusinessPattern, Callable[[Mapping[str, FieldAnalysis]], list[Insight]]
        ] = {
            BusinessPattern.ECOMMERCE_ORDERS: self._ecommerce_insights,
            BusinessPattern.SALES_DATA: self._sales_insights,
            BusinessPattern.CUSTOMER_DATA: self._customer_insights,
        }

    def generate(
        self,
        analyses: Mapping[str, FieldAnalysis],
        pattern: BusinessPattern,
    ) -> list[Insight]:
        """
        Generate insights sorted high, medium, low.

        Ordering is stable within a priority tier.
        """
        insights = [self._quality_insight(analyses)]

        handler = self.pattern_handlers.get(pattern)
        if handler is not None:
            insights.extend(handler(analyses))

        insights.extend(self._identifier_insights(analyses))

        return sorted(insights, key=lambda i: PRIORITY_ORDER[i.priority])

    def _quality_insight(self, analyses: Mapping[str, FieldAnalysis]) -> Insight:
        completeness = [float(a.completeness) for a in analyses.values()]
        average = sum(completeness) / len(completeness) if completeness else 0.0

        if average == 100:
            return Insight(
                type=InsightType.SUCCESS,
                icon="check circle",
                text="Data quality: 100% complete with no missing values",
                priority=InsightPriority.HIGH,
            )
        if average >= self.settings.quality_success_threshold:
            return Insight(
                type=InsightType.SUCCESS,
                icon="check circle",
                text=f"Data quality: {to_fixed(average, 1)}% complete - excellent data quality",
                priority=InsightPriority.HIGH,
            )
        return Insight(
            type=InsightType.WARNING,
            icon="exclamation triangle",
            text=f"Data quality: {to_fixed(average, 1)}% complete - some fields have missing values",
            priority=InsightPriority.HIGH,
        )

    def _ecommerce_insights(self, analyses: Mapping[str, FieldAnalysis]) -> list[Insight]:
        insights = []
        customer_field = _find_by_name(analyses, "customer")
        order_field = _find_by_name(analyses, "order")
        category_field = _find_by_name(analyses, "category")
        country_field = _find_by_name(analyses, "country")
        date_field = _find_by_type(analyses, FieldType.DATE)

        if customer_field and order_field:
            customers = analyses[customer_field].unique_count
            orders = analyses[order_field].total_count
            text = f"{orders} orders from {customers} unique {_plural(customers, 'customer')}"

            if country_field:
                countries = analyses[country_field].unique_count
                if countries:
                    text += f" across {countries} {_plural(countries, 'country', 'countries')}"

            insights.append(Insight(
                type=InsightType.INFO,
                icon="shopping cart",
                text=text,
                priority=InsightPriority.HIGH,
            ))

        if category_field and analyses[category_field].top_values:
            top = analyses[category_field].top_values[0]
            insights.append(Insight(
                type=InsightType.INFO,
                icon="star",
                text=f"{top.value} is the top category ({top.percentage}% of orders)",
                priority=InsightPriority.MEDIUM,
            ))

        if date_field and analyses[date_field].latest:
            dates = analyses[date_field]
            insights.append(Insight(
                type=InsightType.INFO,
                icon="calendar",
                text=f"Order date range: {dates.earliest} to {dates.latest} ({dates.range} days)",
                priority=InsightPriority.MEDIUM,
            ))

        return insights

    def _sales_insights(self, analyses: Mapping[str, FieldAnalysis]) -> list[Insight]:
        amount_field = _find_by_name(analyses, "amount", "revenue", "price")
        if amount_field is None or analyses[amount_field].avg is None:
            return []

        amount = analyses[amount_field]
        return [
            Insight(
                type=InsightType.SUCCESS,
                icon="dollar",
                text=f"Average transaction value: ${to_fixed(amount.avg, 2)}",
                priority=InsightPriority.HIGH,
            ),
            Insight(
                type=InsightType.INFO,
                icon="chart line",
                text=(
                    f"Total revenue: ${to_fixed(amount.sum, 2)} "
                    f"(Range: ${format_number(amount.min)} - ${format_number(amount.max)})"
                ),
                priority=InsightPriority.MEDIUM,
            ),
        ]

    def _customer_insights(self, analyses: Mapping[str, FieldAnalysis]) -> list[Insight]:
        email_field = _find_by_type(analyses, FieldType.EMAIL)
        if email_field is None or not analyses[email_field].top_domains:
            return []

        top = analyses[email_field].top_domains[0]
        return [Insight(
            type=InsightType.INFO,
            icon="mail",
            text=f"Top email domain: {top.domain} ({top.count} customers)",
            priority=InsightPriority.MEDIUM,
        )]

    def _identifier_insights(self, analyses: Mapping[str, FieldAnalysis]) -> list[Insight]:
        insights = []
        for name, analysis in analyses.items():
            if analysis.type != FieldType.ID:
                continue

            if analysis.duplicates:
                insights.append(Insight(
                    type=InsightType.WARNING,
                    icon="copy",
                    text=(
                        f"{analysis.duplicates} duplicate {name} "
                        f"{_plural(analysis.duplicates, 'value')} detected"
                    ),
                    priority=InsightPriority.MEDIUM,
                ))
            else:
                insights.append(Insight(
                    type=InsightType.SUCCESS,
                    icon="check",
                    text=f"All {name} values are unique",
                    priority=InsightPriority.LOW,
                ))
        return insights


# Global generator instance
insight_generator = InsightGenerator()
