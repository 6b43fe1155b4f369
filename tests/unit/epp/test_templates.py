from __future__ import annotations

from pathlib import Path

import pytest

from heartepp.epp.templates.render import MissingVariable, RequestBuilder, substitute
from heartepp.epp.templates.store import (
    FileTemplateStore,
    TemplateNotFound,
    normalize_template_name,
)


def test_placeholder_is_replaced_and_rest_is_untouched() -> None:
    template = '<epp>\n  <clID a="1">[[x]]</clID>\n</epp>\n'
    assert substitute(template, {"x": "abc"}) == '<epp>\n  <clID a="1">abc</clID>\n</epp>\n'


def test_several_placeholders_on_one_line() -> None:
    out = substitute("<a>[[clid]]</a><b>[[pw]]</b>", {"clid": "me", "pw": "secret"})
    assert out == "<a>me</a><b>secret</b>"


def test_values_are_string_coerced() -> None:
    assert substitute("<period>[[years]]</period>", {"years": 2}) == "<period>2</period>"


def test_missing_variable_substitutes_empty_string() -> None:
    assert substitute("<name>[[y]]</name>", {}) == "<name></name>"


def test_missing_variable_in_strict_mode_raises() -> None:
    with pytest.raises(MissingVariable) as exc:
        substitute("<name>[[y]]</name>", {}, strict=True)
    assert exc.value.name == "y"


def test_placeholder_names_are_case_sensitive() -> None:
    assert substitute("[[Domain]]|[[domain]]", {"domain": "example.com"}) == "|example.com"


def test_template_names_are_normalized() -> None:
    assert normalize_template_name("whois") == "Whois"
    assert normalize_template_name("LOGIN") == "Login"
    assert normalize_template_name("lOgOuT") == "Logout"


def test_store_loads_normalized_file(template_root: Path) -> None:
    (template_root / "Template" / "Login.xml").write_text("<login/>", encoding="utf-8")
    source = FileTemplateStore(template_root).load("LOGIN")
    assert source.text == "<login/>"
    assert source.identifier.endswith("Login.xml")


def test_store_honours_subdir(template_root: Path) -> None:
    sub = template_root / "Template" / "reseller"
    sub.mkdir()
    (sub / "Whois.xml").write_text("<check/>", encoding="utf-8")
    assert FileTemplateStore(template_root, "reseller").load("whois").text == "<check/>"


def test_store_missing_template_raises(template_root: Path) -> None:
    with pytest.raises(TemplateNotFound):
        FileTemplateStore(template_root).load("Renew")


def test_builder_renders_with_variables(template_root: Path) -> None:
    (template_root / "Template" / "Whois.xml").write_text(
        "<name>[[domain]]</name><clTRID>[[cltrid]]</clTRID>", encoding="utf-8"
    )
    builder = RequestBuilder(FileTemplateStore(template_root))
    rendered = builder.render("whois", {"domain": "example.com", "cltrid": "t1"})
    assert rendered.xml == "<name>example.com</name><clTRID>t1</clTRID>"
    assert rendered.identifier.endswith("Whois.xml")


def test_strict_builder_propagates_missing_variable(template_root: Path) -> None:
    (template_root / "Template" / "Login.xml").write_text("<pw>[[pw]]</pw>", encoding="utf-8")
    builder = RequestBuilder(FileTemplateStore(template_root), strict=True)
    with pytest.raises(MissingVariable):
        builder.render("login", {})
