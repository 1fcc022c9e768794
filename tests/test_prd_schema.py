"""Tests for the section table and the presence validator."""
import pytest

from app.services.prd_schema import SectionName, validate_prd
from tests.conftest import sample_prd_json


def test_section_order_and_titles():
    assert [s.value for s in SectionName] == [
        "overview",
        "features",
        "tech_stack",
        "ai_integration",
        "ui_ux_design",
        "deployment",
        "roadmap",
    ]
    assert SectionName.UI_UX_DESIGN.display_name == "UI/UX Design"
    assert SectionName("tech_stack") is SectionName.TECH_STACK


def test_complete_document_is_valid():
    assert validate_prd(sample_prd_json()) is True


def test_ai_integration_is_optional():
    content = sample_prd_json()
    del content["ai_integration"]
    assert validate_prd(content) is True

    content["ai_integration"] = "not a dict"
    assert validate_prd(content) is False


@pytest.mark.parametrize(
    "mutate",
    [
        lambda c: c.pop("startup_name"),
        lambda c: c.pop("roadmap"),
        lambda c: c.__setitem__("deployment", "AWS"),
        lambda c: c["overview"].pop("solution"),
        lambda c: c["features"].pop("user_roles"),
        lambda c: c["overview"].__setitem__("target_audience", "everyone"),
        lambda c: c["features"].__setitem__("core_features", None),
        lambda c: c["features"].__setitem__("monetization_model", "ads"),
    ],
)
def test_incomplete_documents_are_rejected(mutate):
    content = sample_prd_json()
    mutate(content)
    assert validate_prd(content) is False


@pytest.mark.parametrize("value", [None, "", [], 42, {"startup_name": "x", "overview": {}}])
def test_validate_never_raises(value):
    assert validate_prd(value) is False
