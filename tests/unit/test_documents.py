"""Tests for doc templates, the readiness gate, generation, and doc state."""

import uuid
import pytest
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

from app.documents import (
    build_brand_data_from_runs,
    check_all_templates_readiness,
    check_doc_readiness,
    generate_doc,
    get_all_doc_states,
    get_doc_state,
    is_implemented_template_id,
    is_valid_template_id,
    templates_by_category,
)
from app.documents.readiness import describe_missing
from app.documents.templates import golden_circle
from app.services.ai_client import AIClientError

BASICS = {
    "business_name": "ACME",
    "industry": "Tools",
    "business_description": "ACME makes anvils.",
    "business_model": "B2C Products",
}
CUSTOMER = {
    "primary_problem": "Roadrunners are fast",
    "buying_motivation": "Pain relief",
    "subcultures": ["coyotes"],
}
GOLDEN_CIRCLE = {
    "why": {"headline": "Catch what you chase", "explanation": "Persistence deserves tools."},
    "how": {"headline": "Overbuilt gear", "explanation": "Everything ships by rocket."},
    "what": {"headline": "Anvils and rockets", "explanation": "A catalogue of contraptions."},
    "summary": "ACME equips the persistent.",
}


def _run(analyzer_type, status="complete", parsed_data=None):
    return SimpleNamespace(analyzer_type=analyzer_type, status=status, parsed_data=parsed_data)


class TestRegistry:
    def test_template_ids(self):
        assert is_valid_template_id("golden-circle")
        assert is_valid_template_id("brand-brief")
        assert not is_valid_template_id("swot")
        assert is_implemented_template_id("golden-circle")
        assert not is_implemented_template_id("brand-brief")

    def test_grouped_available_first(self):
        grouped = templates_by_category()
        assert [c.id for c in grouped["strategy"]] == ["golden-circle", "brand-brief"]
        assert [c.id for c in grouped["audience"]] == ["customer-persona"]


class TestReadiness:
    def test_ready(self):
        runs = [_run("basics", parsed_data=BASICS), _run("customer", parsed_data=CUSTOMER)]
        result = check_doc_readiness(runs, "golden-circle")
        assert result.is_ready
        assert result.completed_analyzers == ["basics", "customer"]
        assert result.missing_fields == []

    def test_incomplete_run_is_missing(self):
        runs = [_run("basics", status="parsing", parsed_data=BASICS), _run("customer", parsed_data=CUSTOMER)]
        result = check_doc_readiness(runs, "golden-circle")
        assert not result.is_ready
        assert result.missing_analyzers == ["basics"]
        assert describe_missing(result).endswith("Missing analyzers: basics")

    def test_complete_without_data_is_missing(self):
        runs = [_run("basics", parsed_data=None), _run("customer", parsed_data=CUSTOMER)]
        assert check_doc_readiness(runs, "golden-circle").missing_analyzers == ["basics"]

    def test_empty_string_field_is_missing(self):
        runs = [
            _run("basics", parsed_data={**BASICS, "business_model": ""}),
            _run("customer", parsed_data={**CUSTOMER, "buying_motivation": None}),
        ]
        result = check_doc_readiness(runs, "golden-circle")
        assert not result.is_ready
        assert [(f.analyzer, f.field) for f in result.missing_fields] == [
            ("basics", "business_model"),
            ("customer", "buying_motivation"),
        ]
        assert describe_missing(result).endswith("Missing fields: Business model type, Buying motivation")

    def test_does_not_mutate_runs(self):
        data = dict(BASICS)
        runs = [_run("basics", parsed_data=data)]
        check_doc_readiness(runs, "golden-circle")
        check_doc_readiness(runs, "golden-circle")
        assert data == BASICS

    def test_all_templates(self):
        results = check_all_templates_readiness([])
        assert list(results) == ["golden-circle"]
        assert results["golden-circle"].missing_analyzers == ["basics", "customer"]

    def test_unknown_template(self):
        with pytest.raises(ValueError):
            check_doc_readiness([], "brand-brief")

    def test_brand_data_from_runs(self):
        runs = [_run("basics", parsed_data=BASICS), _run("products", status="error")]
        data = build_brand_data_from_runs("ACME", "https://acme.test", runs)
        assert data == {
            "brand_name": "ACME",
            "source_url": "https://acme.test",
            "basics": BASICS,
            "customer": None,
            "products": None,
        }


class TestGoldenCircle:
    def test_prompt_uses_brand_data(self):
        prompt = golden_circle.build_prompt({
            "brand_name": "ACME",
            "basics": BASICS,
            "customer": CUSTOMER,
            "products": {"offerings": [{"name": f"Item {i}", "description": "d"} for i in range(8)]},
        })
        assert '"ACME"' in prompt
        assert "Roadrunners are fast" in prompt
        assert "Item 4" in prompt
        assert "Item 5" not in prompt

    def test_post_process_defaults(self):
        result = golden_circle.post_process({"why": {"headline": ""}, "summary": None})
        assert result["why"]["headline"] == "Purpose to be defined"
        assert result["how"]["headline"] == "Approach to be defined"
        assert result["what"]["headline"] == "Offerings to be defined"
        assert result["summary"] == ""

    def test_render_markdown(self):
        markdown = golden_circle.render_markdown(GOLDEN_CIRCLE, "ACME", generated_on=date(2024, 3, 5))
        lines = markdown.split("\n")
        assert lines[0] == "# Golden Circle: ACME"
        assert "## Why" in lines
        assert "**Catch what you chase**" in lines
        assert "*ACME equips the persistent.*" in lines
        assert lines[-1] == "*Generated with The Clever Kit on March 5, 2024*"

    def test_title(self):
        assert golden_circle.generate_title({"brand_name": "ACME"}) == "Golden Circle: ACME"
        assert golden_circle.generate_title({}) == "Golden Circle: Unknown Brand"


@pytest.mark.asyncio
class TestGenerateDoc:
    async def test_success(self):
        with patch("app.documents.generator.ai_client") as ai:
            ai.analyze = AsyncMock(return_value="Golden circle prose")
            ai.parse = AsyncMock(return_value=GOLDEN_CIRCLE)
            result = await generate_doc(uuid.uuid4(), "golden-circle", {"brand_name": "ACME", "basics": BASICS})

        assert result.success
        assert result.raw_content == "Golden circle prose"
        assert result.parsed_content["why"]["headline"] == "Catch what you chase"
        assert result.markdown.startswith("# Golden Circle: ACME")
        assert ai.analyze.await_args.kwargs == {"max_tokens": 2500, "temperature": 0.7}

    async def test_failure_is_returned(self):
        with patch("app.documents.generator.ai_client") as ai:
            ai.analyze = AsyncMock(side_effect=AIClientError("GPT analysis failed: timeout"))
            result = await generate_doc(uuid.uuid4(), "golden-circle", {"brand_name": "ACME"})

        assert not result.success
        assert result.error == "GPT analysis failed: timeout"
        assert result.markdown is None


def _doc(created_at, template_id="golden-circle", status="complete", exported_at=None):
    return SimpleNamespace(
        id=uuid.uuid4(),
        template_id=template_id,
        status=status,
        created_at=created_at,
        google_doc_url="https://docs.google.com/document/d/x/edit" if exported_at else None,
        google_exported_at=exported_at,
    )


class TestDocState:
    NOW = datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc)

    def _brand(self, updated_at):
        return SimpleNamespace(updated_at=updated_at)

    def test_never_generated(self):
        state = get_doc_state([_doc(self.NOW, status="error")], self._brand(self.NOW), "golden-circle")
        assert not state.exists
        assert state.generation_state == "never_generated"
        assert state.primary_action == "generate"
        assert state.status_message == "Not yet generated"

    def test_fresh(self):
        brand = self._brand(self.NOW - timedelta(hours=1))
        state = get_doc_state([_doc(self.NOW)], brand, "golden-circle")
        assert state.generation_state == "generated_fresh"
        assert state.primary_action == "view"
        assert state.status_message == "Generated Mar 5"

    def test_stale_when_brand_updated_later(self):
        brand = self._brand(self.NOW + timedelta(hours=1))
        state = get_doc_state([_doc(self.NOW)], brand, "golden-circle")
        assert state.is_stale
        assert state.primary_action == "view_and_regenerate"
        assert state.status_message == "Generated Mar 5 • Data updated"

    def test_exported_current(self):
        brand = self._brand(self.NOW - timedelta(hours=1))
        doc = _doc(self.NOW, exported_at=self.NOW + timedelta(minutes=5))
        state = get_doc_state([doc], brand, "golden-circle")
        assert state.export_state == "exported_current"
        assert state.primary_action == "open_in_docs"
        assert state.status_message == "Generated Mar 5 • In Google Docs"

    def test_export_stale(self):
        brand = self._brand(self.NOW - timedelta(days=2))
        doc = _doc(self.NOW, exported_at=self.NOW - timedelta(days=1))
        state = get_doc_state([doc], brand, "golden-circle")
        assert state.is_export_stale
        assert state.status_message == "Generated Mar 5 • Docs outdated"

    def test_latest_and_count(self):
        older = _doc(self.NOW - timedelta(days=1))
        newer = _doc(self.NOW)
        state = get_doc_state([older, newer, _doc(self.NOW, status="generating")],
                              self._brand(self.NOW - timedelta(days=2)), "golden-circle")
        assert state.latest_doc is newer
        assert state.generation_count == 2

    def test_all_states_per_template(self):
        docs = [_doc(self.NOW), _doc(self.NOW, template_id="brand-brief")]
        states = get_all_doc_states(docs, self._brand(self.NOW))
        assert set(states) == {"golden-circle", "brand-brief"}
