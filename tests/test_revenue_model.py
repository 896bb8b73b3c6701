import pytest

from app.request import IdeaDataModel
from behaviors.revenue_model import REVENUE_MODELS, detect_revenue_model


@pytest.mark.parametrize(
    "monetization, description, expected",
    [
        ("Monthly SaaS plan", None, "subscription"),
        ("Assinatura mensal", None, "subscription"),
        ("Pay what you want", "A freemium note-taking app", "freemium"),
        ("10% commission on each sale", None, "marketplace"),
        ("Online marketplace fees", None, "marketplace"),
        ("Advertising revenue", None, "advertising"),
        ("Receita de publicidade", None, "advertising"),
        ("Sold per unit", "Artisan bread", "one_time"),
        (None, None, "one_time"),
    ],
)
def test_detect_revenue_model(monetization, description, expected):
    assert detect_revenue_model(monetization, description) == expected


def test_subscription_rule_wins_over_later_rules():
    assert detect_revenue_model("monthly subscription plus advertising") == "subscription"
    assert detect_revenue_model("commission", "freemium tier") == "freemium"


def test_every_detected_label_is_known():
    for text in ("saas", "freemium", "marketplace", "advert", "", None):
        assert detect_revenue_model(text) in REVENUE_MODELS


def test_declared_revenue_model_wins():
    idea = IdeaDataModel.model_validate({"monetization": "monthly plan", "revenueModel": "Marketplace"})
    assert idea.detected_revenue_model() == "marketplace"

    unknown = IdeaDataModel.model_validate({"monetization": "monthly plan", "revenue_model": "barter"})
    assert unknown.detected_revenue_model() == "subscription"
