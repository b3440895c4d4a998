import importlib

import datagrid.settings as settings


def test_page_size_env_override(monkeypatch):
    monkeypatch.setenv("DATAGRID_PAGE_SIZE", "25")
    try:
        assert importlib.reload(settings).DEFAULT_PAGE_SIZE == 25
    finally:
        monkeypatch.delenv("DATAGRID_PAGE_SIZE")
        importlib.reload(settings)


def test_invalid_page_size_env_falls_back(monkeypatch):
    monkeypatch.setenv("DATAGRID_PAGE_SIZE", "lots")
    try:
        assert importlib.reload(settings).DEFAULT_PAGE_SIZE == 10
    finally:
        monkeypatch.delenv("DATAGRID_PAGE_SIZE")
        importlib.reload(settings)


def test_page_size_options_contain_default():
    assert settings.DEFAULT_PAGE_SIZE in settings.PAGE_SIZE_OPTIONS
