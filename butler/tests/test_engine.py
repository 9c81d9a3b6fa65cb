import pytest

from butler.core.errors import TemplateError
from butler.core.models import TemplateDescriptor


class TestNameTemplating:
    def test_renders_answer_at_top_level(self, make_evaluator):
        evaluator = make_evaluator(answers={"Name": "demo"})
        assert evaluator.render_name("dir", "{ Name }") == "demo"
        assert evaluator.render_name("dir", "{Name}") == "demo"

    def test_condition_renders_blank(self, make_evaluator):
        evaluator = make_evaluator()
        assert evaluator.render_name("dir", "{% if false %}x{% endif %}") == ""

    def test_content_delimiters_are_ignored_in_names(self, make_evaluator):
        evaluator = make_evaluator()
        # only "{" opens a name expression; "butler" is plain text here
        assert evaluator.render_name("f", "butler{ project.name }") == "butlerdemo"

    def test_filters(self, make_evaluator):
        evaluator = make_evaluator(answers={"Name": "MyModule"})
        assert evaluator.render_name("f", "{ Name | snake_case }.py") == "my_module.py"

    @pytest.mark.parametrize(
        "value", ["/etc/passwd", "../up", "a/b", "..", ".", "a\x00b"]
    )
    def test_rejects_names_leaving_the_directory(self, make_evaluator, value):
        evaluator = make_evaluator(answers={"n": value})
        with pytest.raises(TemplateError, match="not a plain file name"):
            evaluator.render_name("dir", "{ n }")

    def test_absolute_path_function_is_rejected(self, make_evaluator):
        evaluator = make_evaluator()
        with pytest.raises(TemplateError):
            evaluator.render_name("f", "{ path_abs('leak.txt') }")


class TestContentTemplating:
    def test_scenario_project_name(self, make_evaluator):
        evaluator = make_evaluator()
        assert evaluator.render_content("README.md", "Hello butler{ project.name }") == "Hello demo"

    def test_plain_braces_are_left_alone(self, make_evaluator):
        evaluator = make_evaluator()
        text = '{"name": "butler{ project.name }", "nested": {"a": 1}}\n'
        assert evaluator.render_content("package.json", text) == (
            '{"name": "demo", "nested": {"a": 1}}\n'
        )

    def test_keeps_trailing_newline(self, make_evaluator):
        evaluator = make_evaluator()
        assert evaluator.render_content("f", "x\n") == "x\n"

    def test_blocks_and_functions(self, make_evaluator):
        evaluator = make_evaluator(answers={"langs": ["py", "go"]})
        text = "butler{% for lang in langs %}butler{ upper(lang) } butler{% endfor %}"
        assert evaluator.render_content("f", text) == "PY GO "

    def test_context_values(self, make_evaluator):
        evaluator = make_evaluator(variables={"team": "core"})
        text = "butler{ year } butler{ date } butler{ vars.team } butler{ project.description }"
        assert evaluator.render_content("f", text) == (
            "2024 2024-05-17T12:00:00+00:00 core A demo project"
        )

    def test_undefined_name_raises(self, make_evaluator):
        evaluator = make_evaluator()
        with pytest.raises(TemplateError, match="f.txt"):
            evaluator.render_content("f.txt", "butler{ missing }")

    def test_syntax_error_raises(self, make_evaluator):
        evaluator = make_evaluator()
        with pytest.raises(TemplateError):
            evaluator.render_content("f", "butler{% if %}")

    def test_undefined_function_raises(self, make_evaluator):
        evaluator = make_evaluator()
        with pytest.raises(TemplateError):
            evaluator.render_content("f", "butler{ no_such_function() }")


class TestLookups:
    def test_answer_lookup_by_evaluated_key(self, make_evaluator):
        evaluator = make_evaluator(answers={"db-engine": "postgres"})
        text = "butler{ answer('db-' ~ 'engine') }"
        assert evaluator.render_content("f", text) == "postgres"

    def test_question_lookup_exposes_options(self, make_evaluator):
        descriptor = TemplateDescriptor.model_validate(
            {
                "questions": [
                    {
                        "type": "select",
                        "name": "ci",
                        "message": "CI?",
                        "options": ["github", "gitlab"],
                    }
                ]
            }
        )
        evaluator = make_evaluator(answers={"ci": "github"}, descriptor=descriptor)
        text = "butler{ join(question('ci').options, ',') }"
        assert evaluator.render_content("f", text) == "github,gitlab"

    def test_unknown_answer_raises(self, make_evaluator):
        evaluator = make_evaluator()
        with pytest.raises(TemplateError, match="KeyError"):
            evaluator.render_content("f", "butler{ answer('nope') }")


class TestConditions:
    def test_true_and_false(self, make_evaluator):
        evaluator = make_evaluator(answers={"docker": True, "ci": "none"})
        assert evaluator.render_condition("hook", "docker") is True
        assert evaluator.render_condition("hook", "ci == 'github'") is False
        assert evaluator.render_condition("hook", "answers.docker and year > 2000") is True

    def test_malformed_condition_raises(self, make_evaluator):
        evaluator = make_evaluator()
        with pytest.raises(TemplateError):
            evaluator.render_condition("hook", "(")


class TestVariableResolution:
    def test_self_templating_variables(self, make_evaluator):
        evaluator = make_evaluator(
            variables={"company": "ACME", "copyright": "(c) butler{ year } butler{ vars.company }"}
        )
        assert evaluator.context.variables["copyright"] == "(c) 2024 ACME"
        assert evaluator.render_content("f", "butler{ vars.copyright }") == "(c) 2024 ACME"

    def test_non_string_variables_untouched(self, make_evaluator):
        evaluator = make_evaluator(variables={"ports": [80, 443], "debug": True})
        assert evaluator.context.variables == {"ports": [80, 443], "debug": True}
