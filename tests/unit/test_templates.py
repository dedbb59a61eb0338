"""Tests for the template file format and store."""

from __future__ import annotations

import pytest

from sqli.domains.templates.store import (
    GLOBAL,
    Template,
    TemplateScope,
    TemplateStore,
    find_placeholder,
    parse_templates,
    serialize_template,
    serialize_templates,
)


class TestParseTemplates:
    def test_single_global_template(self):
        """Should parse a header and its query into one global template."""
        templates = parse_templates("--- Test [global]\nselect 1\n")
        assert templates == [Template(name="Test", query="select 1", scope=GLOBAL)]
        assert templates[0].scope.is_global

    def test_scoped_template(self):
        templates = parse_templates("--- Active [prod, staging]\nselect * from users\nwhere active\n")
        assert templates[0].scope == TemplateScope(("prod", "staging"))
        assert templates[0].query == "select * from users\nwhere active"

    def test_multiple_templates(self):
        content = "--- One [global]\nselect 1\n\n--- Two [dev]\nselect 2\n"
        assert [t.name for t in parse_templates(content)] == ["One", "Two"]

    def test_text_before_first_header_is_ignored(self):
        assert parse_templates("select 0\n--- One [global]\nselect 1\n")[0].query == "select 1"

    def test_empty_query_is_skipped(self):
        assert parse_templates("--- Empty [global]\n\n--- One [global]\nselect 1\n") == [
            Template(name="One", query="select 1")
        ]

    def test_header_without_scope_is_skipped(self):
        assert parse_templates("--- No scope\nselect 1\n") == []

    def test_name_may_contain_brackets(self):
        templates = parse_templates("--- Rows [fast] [global]\nselect 1\n")
        assert templates[0].name == "Rows [fast]"
        assert templates[0].scope.is_global


class TestSerialize:
    def test_serialize_global(self):
        assert serialize_template(Template("Test", "select 1")) == "--- Test [global]\nselect 1\n"

    def test_serialize_scoped(self):
        template = Template("Active", "select 1", TemplateScope(("prod", "dev")))
        assert serialize_template(template) == "--- Active [prod,dev]\nselect 1\n"

    def test_serialized_file_parses_back(self):
        templates = [
            Template("One", "select 1"),
            Template("Two", "select *\nfrom t", TemplateScope(("dev",))),
        ]
        assert parse_templates(serialize_templates(templates)) == templates


class TestScope:
    @pytest.mark.parametrize("text", ["", "global", "GLOBAL", "  global  "])
    def test_global_spellings(self, text):
        assert TemplateScope.parse(text).is_global

    def test_matches(self):
        scope = TemplateScope.parse("prod,dev")
        assert scope.matches("dev")
        assert not scope.matches("staging")
        assert GLOBAL.matches("anything")


class TestFindPlaceholder:
    def test_first_placeholder(self):
        """Should locate the first placeholder as line, column and length."""
        assert find_placeholder("select * from <table> where id=<id>") == (0, 14, 7)

    def test_placeholder_on_later_line(self):
        assert find_placeholder("select *\nfrom <t>") == (1, 5, 3)

    def test_no_placeholder(self):
        assert find_placeholder("select 1 < 2") is None


class TestTemplateStore:
    def test_missing_file_loads_empty(self, template_store):
        assert template_store.load() == []

    def test_add_persists(self, template_store):
        template_store.add(Template("One", "select 1"))
        reloaded = TemplateStore(template_store.file_path)
        assert reloaded.load() == [Template("One", "select 1")]

    def test_delete(self, template_store):
        template_store.save([Template("One", "select 1"), Template("Two", "select 2")])
        assert template_store.delete(0)
        assert [t.name for t in template_store.templates] == ["Two"]
        assert not template_store.delete(5)

    def test_replace(self, template_store):
        template_store.save([Template("One", "select 1")])
        template_store.replace(0, Template("Uno", "select 1"))
        assert TemplateStore(template_store.file_path).load()[0].name == "Uno"

    def test_for_connection_keeps_store_indexes(self, template_store):
        template_store.save(
            [
                Template("Prod only", "select 1", TemplateScope(("prod",))),
                Template("Everywhere", "select 2"),
            ]
        )
        assert [(i, t.name) for i, t in template_store.for_connection("dev")] == [(1, "Everywhere")]
        assert len(template_store.for_connection("prod")) == 2
