import pytest

from datagrid.services.cell_renderers import (
    CellRendererRegistry,
    date_renderer,
    register_issue_renderers,
    text_renderer,
)

ISSUE = {
    "key": "OPS-7",
    "fields": {
        "summary": "Renew vendor agreement",
        "status": {"name": "In Progress"},
        "assignee": {"emailAddress": "a@example.com"},
        "created": "2024-03-01T10:15:00.000+0000",
        "customfield_10200": "Dana",
    },
}


def test_registry_fallback_for_unknown_keys():
    reg = CellRendererRegistry()
    assert reg.render("key", ISSUE) == "OPS-7"
    assert reg.render("nothing", ISSUE) == "N/A"


def test_registry_rejects_duplicates_without_overwrite():
    reg = CellRendererRegistry()
    reg.register("x", lambda r: 1)
    with pytest.raises(ValueError):
        reg.register("x", lambda r: 2)
    reg.register("x", lambda r: 3, overwrite=True)
    assert reg.render("x", {}) == 3
    reg.unregister("x")
    assert reg.keys() == []


def test_issue_renderers():
    reg = register_issue_renderers()
    assert reg.render("summary", ISSUE) == "Renew vendor agreement"
    assert reg.render("status", ISSUE) == "In Progress"
    assert reg.render("priority", ISSUE) == "Unknown"
    assert reg.render("assignee", ISSUE) == "No name"
    assert reg.render("assignee", {"fields": {}}) == "Unassigned"
    assert reg.render("created", ISSUE) == "2024-03-01"
    assert reg.render("updated", ISSUE) == "Unknown"
    assert reg.render("actions", ISSUE) == ""
    # Custom fields resolve under "fields" through the fallback
    assert reg.render("customfield_10200", ISSUE) == "Dana"
    assert reg.render("customfield_10201", ISSUE) == "N/A"


def test_register_issue_renderers_is_idempotent():
    reg = register_issue_renderers()
    register_issue_renderers(reg)
    assert "status" in reg.keys()


def test_text_and_date_renderers_defaults():
    assert text_renderer("a.b", "-")({"a": {"b": "  "}}) == "-"
    assert date_renderer("d")({"d": "not a date"}) == "not a date"
