"""
Insights — advisory narrative summaries from an external text-generation service.
"""

from .narrative import (
    INSIGHTS_UNAVAILABLE,
    InsightGenerator,
    NullInsightGenerator,
    OpenAIInsightGenerator,
    build_prompt,
    default_insight_generator,
    generate_insights_safely,
)

__all__ = [
    "INSIGHTS_UNAVAILABLE",
    "InsightGenerator",
    "NullInsightGenerator",
    "OpenAIInsightGenerator",
    "build_prompt",
    "default_insight_generator",
    "generate_insights_safely",
]
