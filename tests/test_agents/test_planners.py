"""
Tests for the Macro Planner, Shot Planner and Settings Planner agents.
"""

import asyncio

import pytest

from conftest import FakeStructuredGenerator, narrative_payload, panels_payload, settings_payload
from panelsmith.agents.base_agent import AgentConfig, BaseAgent
from panelsmith.agents.macro_planner import MacroPlanner
from panelsmith.agents.settings_planner import SettingsPlanner, suggestion_to_project_settings
from panelsmith.agents.shot_planner import ShotPlanner
from panelsmith.core.config import StructuredGenerationConfig
from panelsmith.core.exceptions import CapabilityUnavailableError, SchemaViolationError
from panelsmith.core.retry import RetryConfig
from panelsmith.llm.capabilities import StructuredGenerator
from panelsmith.llm.schemas import narrative_plan_schema

NO_RETRY = StructuredGenerationConfig(max_retries=0)


class TestMacroPlanner:

    @pytest.mark.asyncio
    async def test_plans_exact_page_count(self, generator):
        planner = MacroPlanner(generator, NO_RETRY)

        plan = await planner.plan("A hero finds a hidden door", 3, character_names=["Rex"],
                                  location_names=["Cave"], style="Bold ink")

        assert [p.page_number for p in plan.pages] == [1, 2, 3]
        assert plan.title == "The Hidden Door"
        call = generator.calls[0]
        assert "exactly 3 pages" in call.instructions
        assert "Rex" in call.instructions and "Cave" in call.instructions
        assert "A hero finds a hidden door" in call.user_prompt

    @pytest.mark.asyncio
    async def test_renumbers_pages(self, generator):
        payload = narrative_payload(2)
        payload["pages"][0]["pageNumber"] = 7
        payload["pages"][1]["pageNumber"] = 7
        generator.queue(payload)

        plan = await MacroPlanner(generator, NO_RETRY).plan("story", 2)

        assert [p.page_number for p in plan.pages] == [1, 2]

    @pytest.mark.asyncio
    async def test_zero_pages_makes_no_call(self, generator):
        plan = await MacroPlanner(generator, NO_RETRY).plan("story", 0)

        assert plan.pages == []
        assert generator.calls == []

    @pytest.mark.asyncio
    async def test_negative_page_count(self, generator):
        with pytest.raises(ValueError):
            await MacroPlanner(generator, NO_RETRY).plan("story", -1)

    @pytest.mark.asyncio
    async def test_schema_violation_propagates(self, generator):
        generator.queue(SchemaViolationError("structured_generation", "bad output"))

        with pytest.raises(SchemaViolationError):
            await MacroPlanner(generator, NO_RETRY).plan("story", 1)


class TestShotPlanner:

    @pytest.mark.asyncio
    async def test_lists_registered_identities(self, generator, registry):
        planner = ShotPlanner(generator, NO_RETRY)

        shots = await planner.plan("Rex enters the cave", 3, "tense", registry, page_number=2)

        assert [s.panel_number for s in shots] == [1, 2, 3]
        assert shots[0].characters[0].identity_ref == "c1"
        assert shots[0].location.identity_ref == "l1"
        assert shots[0].location.time_of_day == "night"
        instructions = generator.calls[0].instructions
        assert 'ID: "c1" | Name: "Rex"' in instructions
        assert 'ID: "l1" | Name: "Cave"' in instructions
        assert "PAGE NUMBER: 2" in instructions

    @pytest.mark.asyncio
    async def test_sentinels_offered_without_identities(self, generator):
        from panelsmith.references.identity_registry import IdentityRegistry

        await ShotPlanner(generator, NO_RETRY).plan("An empty street", 1, None, IdentityRegistry())

        instructions = generator.calls[0].instructions
        assert 'use id: "generic"' in instructions
        assert 'use id: "new"' in instructions

    @pytest.mark.asyncio
    async def test_zero_panels_makes_no_call(self, generator, registry):
        assert await ShotPlanner(generator, NO_RETRY).plan("page", 0, None, registry) == []
        assert generator.calls == []

    @pytest.mark.asyncio
    async def test_missing_dialogue_hint_defaults_empty(self, generator, registry):
        payload = panels_payload(1)
        del payload["panels"][0]["dialogueHint"]
        generator.queue(payload)

        shots = await ShotPlanner(generator, NO_RETRY).plan("page", 1, None, registry)

        assert shots[0].dialogue_hint == ""


class _SlowGenerator(StructuredGenerator):
    async def generate(self, instructions, user_prompt, output_schema):
        await asyncio.sleep(1)



class TestSettingsPlanner:

    @pytest.mark.asyncio
    async def test_offers_every_option(self, generator):
        suggestion = await SettingsPlanner(generator, NO_RETRY).suggest("  Two explorers find a door  ")

        assert suggestion.art_style == "comic-american"
        call = generator.calls[0]
        assert "manga, comic-american" in call.instructions
        assert "1 to 4 main characters" in call.instructions
        assert call.user_prompt == "Story idea: Two explorers find a door"

    @pytest.mark.asyncio
    async def test_empty_idea_makes_no_call(self, generator):
        with pytest.raises(ValueError):
            await SettingsPlanner(generator, NO_RETRY).suggest("  ")
        assert generator.calls == []

    @pytest.mark.asyncio
    async def test_unknown_style_is_schema_violation(self):
        class _Strict(StructuredGenerator):
            async def generate(self, instructions, user_prompt, output_schema):
                try:
                    return output_schema.model_validate(settings_payload(artStyle="cubist"))
                except ValueError as e:
                    raise SchemaViolationError(self.name, str(e))

        with pytest.raises(SchemaViolationError):
            await SettingsPlanner(_Strict(), NO_RETRY).suggest("A heist")

    @pytest.mark.asyncio
    async def test_project_settings_from_suggestion(self, generator):
        suggestion = await SettingsPlanner(generator, NO_RETRY).suggest("Explorers")

        data = suggestion_to_project_settings(suggestion)

        assert data["artStyle"] == {"name": "comic-american"}
        assert data["defaultLighting"] == "moonlight"
        assert data["projectContext"].startswith("The Hidden Door (adventure)")
        assert data["characters"][1] == {
            "id": "character_2", "name": "Mira", "description": "A cartographer with a lantern",
        }
        assert data["locations"][0]["id"] == "location_1"

class TestBaseAgent:

    @pytest.mark.asyncio
    async def test_timeout_becomes_capability_unavailable(self):
        agent = BaseAgent(AgentConfig(name="Slow", timeout=0.01, retry=RetryConfig(max_retries=0)),
                          _SlowGenerator())

        with pytest.raises(CapabilityUnavailableError, match="timed out"):
            await agent.call_structured("", "", narrative_plan_schema(1))

    @pytest.mark.asyncio
    async def test_unavailable_is_retried(self):
        generator = FakeStructuredGenerator().queue(
            CapabilityUnavailableError("structured_generation", "rate limited"),
        )
        agent = BaseAgent(
            AgentConfig(name="Retrying", retry=RetryConfig.from_delays([0])),
            generator,
        )

        result = await agent.call_structured("", "", narrative_plan_schema(1))

        assert len(result.pages) == 1
        assert len(generator.calls) == 2
