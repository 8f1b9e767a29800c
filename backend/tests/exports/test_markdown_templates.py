"""Tests for MarkdownExporter templates."""

from types import SimpleNamespace

import pytest

from prdforge.exports.markdown_exporter import MARKDOWN_TEMPLATE_DIR, MarkdownExporter, template_name
from prdforge.schemas.payloads import ArtifactKind, dump_payload, validate_payload

pytestmark = pytest.mark.unit


def _artifact(kind: ArtifactKind, payload: dict, title: str = "ShelfLife", raw_input: str = "grocery expiry app"):
    return SimpleNamespace(
        kind=kind.value,
        title=title,
        raw_input=raw_input,
        payload=dump_payload(validate_payload(kind, payload)),
    )


@pytest.fixture
def exporter():
    return MarkdownExporter()


@pytest.mark.parametrize("kind", list(ArtifactKind))
def test_every_kind_has_a_template(kind):
    assert (MARKDOWN_TEMPLATE_DIR / template_name(kind)).is_file()


@pytest.mark.parametrize("kind", list(ArtifactKind))
def test_empty_payload_renders_title(exporter, kind):
    markdown = exporter.export(_artifact(kind, {}))

    assert markdown.startswith("# ShelfLife\n")


def test_prd_sections_and_stories(exporter):
    payload = {
        "problemStatement": "Grocers waste perishable stock.",
        "goals": ["Cut waste by 30%"],
        "outOfScope": ["Payments"],
        "userStories": [
            {
                "id": "us-1",
                "title": "Scan barcodes",
                "priority": "high",
                "description": "As a clerk I scan items.",
                "acceptanceCriteria": ["Scanning adds the item"],
                "edgeCases": ["Damaged barcode"],
            }
        ],
    }

    markdown = exporter.export(_artifact(ArtifactKind.PRD, payload))

    assert "## Problem Statement\n\nGrocers waste perishable stock." in markdown
    assert "## Goals & Objectives\n\n- Cut waste by 30%" in markdown
    assert "## Out of Scope" in markdown
    assert "## Target Audience" not in markdown
    assert "### US-001: Scan barcodes" in markdown
    assert "Priority: high" in markdown
    assert "- Scanning adds the item" in markdown
    assert "Edge Cases:" in markdown
    assert "- Damaged barcode" in markdown
    assert "Tool:" not in markdown


def test_tool_kinds_carry_input_header(exporter):
    markdown = exporter.export(
        _artifact(
            ArtifactKind.PROBLEM_REFINER,
            {"refinedStatement": "New users abandon setup.", "successCriteria": ["Activation +10%"]},
            title="Refined Problem: Users churn",
            raw_input="Users churn",
        )
    )

    assert "Tool: problem-refiner\nInput: Users churn\n\n---" in markdown
    assert "## Refined Statement\n\nNew users abandon setup." in markdown
    assert "- Activation +10%" in markdown


def test_feature_prioritizer_lists_scores(exporter):
    payload = {
        "features": [{"name": "SSO", "reach": 8, "impact": 9, "confidence": 8, "effort": 6, "recommendation": "must"}],
        "summary": "Ship SSO first.",
    }

    markdown = exporter.export(_artifact(ArtifactKind.FEATURE_PRIORITIZER, payload))

    assert "### SSO" in markdown
    assert "RICE Score: 96.0 | Recommendation: Must Have" in markdown
    assert "## Summary\n\nShip SSO first." in markdown


def test_sprint_planner_stories_and_risks(exporter):
    payload = {
        "sprintGoal": "Ship checkout",
        "stories": [{"title": "Checkout page", "storyPoints": 5, "priority": "high"}],
        "risks": [{"risk": "Stripe outage", "severity": "low", "mitigation": "Retry"}],
    }

    markdown = exporter.export(_artifact(ArtifactKind.SPRINT_PLANNER, payload))

    assert "- Checkout page (5 pts, high)" in markdown
    assert "- Stripe outage (low): Retry" in markdown


def test_filename_is_slugged():
    artifact = SimpleNamespace(title="ShelfLife: Grocery / Expiry!")
    assert MarkdownExporter.filename(artifact) == "shelflife-grocery-expiry.md"
    assert MarkdownExporter.filename(SimpleNamespace(title="???")) == "artifact.md"
