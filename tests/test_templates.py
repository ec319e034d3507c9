"""Tests for the prompt template system."""

import json

import pytest
import yaml

from growth_advisor.advisor import (
    FileTemplateLoader,
    GROWTH_REPORT_TEMPLATE,
    PromptTemplate,
    PromptVariable,
    TemplateManager,
)


class TestPromptTemplate:

    def test_render_with_defaults(self):
        """Declared defaults fill variables that are not passed."""
        template = PromptTemplate(
            name="t",
            template="Hello $name, $greeting",
            variables=[
                PromptVariable("name", "Who to greet"),
                PromptVariable("greeting", "Greeting text", required=False, default_value="welcome"),
            ],
        )
        assert template.render(name="Jane") == "Hello Jane, welcome"

    def test_missing_required_variable(self):
        """Missing required variables raise ValueError."""
        template = PromptTemplate(name="t", template="$a", variables=[PromptVariable("a", "A")])
        with pytest.raises(ValueError, match="Missing required variables"):
            template.render()

    def test_undeclared_placeholder(self):
        """A placeholder with no value raises ValueError."""
        template = PromptTemplate(name="t", template="$a and $b")
        with pytest.raises(ValueError, match="missing variable"):
            template.render(a="1")

    def test_json_braces_left_alone(self):
        """Literal JSON braces survive rendering."""
        template = PromptTemplate(name="t", template='{"key": "$value"}')
        assert template.render(value="x") == '{"key": "x"}'


class TestBuiltinTemplate:

    @pytest.mark.asyncio
    async def test_growth_report_embeds_summary_and_schema(self):
        """The built-in template embeds the summary and output schema."""
        manager = TemplateManager()

        prompt = await manager.render_template(GROWTH_REPORT_TEMPLATE, {"student_summary": "SUMMARY TEXT\n"})

        assert "SUMMARY TEXT" in prompt
        for key in ["growthSummary", "actionableSteps", "motivationalQuote", "weeklyStudyPlan"]:
            assert f'"{key}"' in prompt
        assert "$" not in prompt

    @pytest.mark.asyncio
    async def test_unknown_template(self):
        """Unknown template names raise KeyError."""
        with pytest.raises(KeyError):
            await TemplateManager().get_template("does_not_exist")


class TestFileTemplates:

    @pytest.mark.asyncio
    async def test_yaml_template_overrides_builtin(self, tmp_path):
        """A YAML file overrides the built-in template."""
        (tmp_path / "growth_report.yaml").write_text(yaml.safe_dump({
            "description": "Short prompt",
            "template": "Advise this student:\n$student_summary",
            "variables": [{"name": "student_summary", "description": "Summary"}],
            "version": "2.0",
        }))
        manager = TemplateManager.with_templates_dir(tmp_path)

        template = await manager.get_template(GROWTH_REPORT_TEMPLATE)

        assert template.version == "2.0"
        assert template.render(student_summary="S") == "Advise this student:\nS"

    @pytest.mark.asyncio
    async def test_falls_back_to_builtin(self, tmp_path):
        """Without an override file the built-in template is used."""
        manager = TemplateManager.with_templates_dir(tmp_path)

        template = await manager.get_template(GROWTH_REPORT_TEMPLATE)

        assert "Student Growth Advisor" in template.template

    @pytest.mark.asyncio
    async def test_json_and_text_templates(self, tmp_path):
        """JSON and plain-text template files load."""
        (tmp_path / "a.json").write_text(json.dumps({"template": "JSON $x"}))
        (tmp_path / "b.txt").write_text("TEXT $x")
        loader = FileTemplateLoader(tmp_path)

        assert await loader.list_templates() == ["a", "b"]
        assert (await loader.load_template("a")).render(x="1") == "JSON 1"
        assert (await loader.load_template("b")).render(x="2") == "TEXT 2"

    @pytest.mark.asyncio
    async def test_yaml_without_template_key(self, tmp_path):
        """A YAML file without a template key raises ValueError."""
        (tmp_path / "bad.yaml").write_text("description: nothing here\n")

        with pytest.raises(ValueError, match="'template' key"):
            await FileTemplateLoader(tmp_path).load_template("bad")

    @pytest.mark.asyncio
    async def test_missing_directory_lists_nothing(self, tmp_path):
        """A missing templates directory lists no templates."""
        assert await FileTemplateLoader(tmp_path / "missing").list_templates() == []
