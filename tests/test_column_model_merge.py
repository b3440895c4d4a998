from datagrid.models import Column, Field
from datagrid.services.column_model import ColumnModel, merge


def _fields():
    return [
        Field(id="key", name="Key", orderable=True, navigable=True),
        Field(id="status", name="Status", orderable=True, navigable=True),
        Field(id="watches", name="Watchers", orderable=False, navigable=False),
    ]


def test_merge_keeps_local_column_and_appends_new():
    existing = [
        Column("key", "Key", True, True),
        Column("actions", "Actions", False, True),
    ]
    incoming = [
        Field(id="key", name="Key", orderable=True, navigable=True),
        Field(id="status", name="Status", orderable=True, navigable=True),
    ]
    result = merge(existing, incoming)
    assert [c.key for c in result] == ["key", "actions", "status"]
    assert result[2].is_selected is True
    assert result[1] == existing[1]


def test_merge_updates_title_and_sortability_but_not_selection():
    existing = [Column("status", "state", is_sortable=False, is_selected=False)]
    result = merge(existing, [Field(id="status", name="Status", orderable=True, navigable=True)])
    assert result == [Column("status", "Status", is_sortable=True, is_selected=False)]


def test_merge_skips_non_navigable_fields():
    result = merge([], _fields())
    assert [c.key for c in result] == ["key", "status"]


def test_merge_empty_schema_is_noop():
    existing = [Column("key", "Key"), Column("actions", "Actions", False)]
    assert merge(existing, []) == existing
    assert merge(existing, None) == existing


def test_merge_does_not_mutate_input():
    existing = [Column("key", "k", False, False)]
    snapshot = list(existing)
    merge(existing, _fields())
    assert existing == snapshot


def test_merge_is_idempotent():
    existing = [Column("actions", "Actions", False, True), Column("key", "Key", True, False)]
    once = merge(existing, _fields())
    twice = merge(once, _fields())
    assert once == twice


def test_merge_duplicate_field_ids_first_wins():
    fields = [
        Field(id="status", name="Status", orderable=True, navigable=True),
        Field(id="status", name="Other", orderable=False, navigable=True),
    ]
    result = merge([], fields)
    assert result == [Column("status", "Status", True, True)]


def test_merge_collapses_duplicate_existing_keys():
    existing = [Column("key", "Key"), Column("key", "Key again", False, False)]
    result = merge(existing, [Field(id="key", name="Issue key", orderable=True, navigable=True)])
    assert result == [Column("key", "Issue key", True, True)]
    assert merge(existing, []) == [Column("key", "Key")]


def test_merge_preserves_previous_order():
    existing = [Column("status", "Status"), Column("key", "Key")]
    result = merge(existing, _fields())
    assert [c.key for c in result] == ["status", "key"]


def test_field_from_json_obj_ignores_extra_keys():
    fld = Field.from_json_obj(
        {"id": "customfield_10200", "name": "Assignee (Custom)", "custom": True,
         "orderable": True, "navigable": True, "searchable": True, "clauseNames": ["cf[10200]"]}
    )
    assert fld == Field("customfield_10200", "Assignee (Custom)", True, True, True)


def test_column_model_tracks_local_keys():
    model = ColumnModel([Column("key", "Key"), Column("actions", "Actions", False)])
    assert model.merge_schema(_fields()) is True
    assert model.is_local("actions") is True
    assert model.is_local("key") is False
    # Second delivery of the same schema changes nothing
    assert model.merge_schema(_fields()) is False


def test_column_model_visibility_operations():
    model = ColumnModel([Column("key", "Key"), Column("summary", "Summary"), Column("created", "Created", True, False)])
    assert [c.key for c in model.visible()] == ["key", "summary"]
    assert model.toggle("created") is True
    assert model.get("created").is_selected is True
    assert model.toggle("missing") is False
    assert model.deselect_all() is True
    assert model.visible() == []
    assert model.select_all() is True
    assert len(model.visible()) == 3
    model.reset()
    assert model.columns == model.defaults


def test_column_model_search_matches_title_or_key():
    model = ColumnModel([Column("customfield_10200", "Assignee (Custom)"), Column("status", "Status")])
    assert [c.key for c in model.search("assig")] == ["customfield_10200"]
    assert [c.key for c in model.search("STAT")] == ["status"]
    assert len(model.search("  ")) == 2


def test_column_model_dedupes_defaults():
    model = ColumnModel([Column("key", "Key"), Column("key", "Again")])
    assert model.keys() == ["key"]


def test_apply_layout_restores_order_and_placeholders():
    model = ColumnModel([Column("key", "Key"), Column("summary", "Summary"), Column("actions", "Actions", False)])
    model.apply_layout(
        [
            {"key": "summary", "selected": False},
            {"key": "customfield_1", "selected": True},
            {"key": "key", "selected": True},
            {"key": "summary", "selected": True},
        ]
    )
    assert model.keys() == ["summary", "customfield_1", "key", "actions"]
    assert model.get("summary").is_selected is False
    placeholder = model.get("customfield_1")
    assert placeholder.title == "customfield_1" and placeholder.is_sortable is False
    model.merge_schema([Field("customfield_1", "Team", orderable=True, navigable=True)])
    assert model.get("customfield_1") == Column("customfield_1", "Team", True, True)
    assert model.keys() == ["summary", "customfield_1", "key", "actions"]
