# tests/test_template_store.py
from pathlib import Path

import pytest

from runtpl.config.settings import RuntplConfig
from runtpl.core.template_store import TemplateStore
from runtpl.exceptions import TemplateStoreError


@pytest.fixture
def store(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return TemplateStore(tmp_path / "store")


def _writer(text):
    return lambda path: path.write_text(text, encoding="utf-8")


def test_root_is_created_on_demand(store):
    assert not store.root.exists()
    assert store.list_names() == []
    assert store.root.is_dir()


def test_path_for(store):
    assert store.path_for("greet") == store.root / "greet.tpl"


@pytest.mark.parametrize("bad_name", ["", "sub/greet", "../greet"])
def test_path_for_rejects_paths(store, bad_name):
    with pytest.raises(TemplateStoreError, match="Invalid template name"):
        store.path_for(bad_name)


def test_extension_is_configurable(tmp_path):
    store = TemplateStore(tmp_path, extension=".md")
    assert store.path_for("x") == tmp_path / "x.md"


def test_create_list_and_read(store):
    assert store.create("b", _writer("B {{x}}"))
    assert store.create("a", _writer("A"))
    (store.root / "notes.txt").write_text("ignored")

    assert store.list_names() == ["a", "b"]
    assert store.read("b") == "B {{x}}"


def test_create_empty_is_discarded(store):
    assert store.create("empty", lambda path: None) is False
    assert not store.path_for("empty").exists()


def test_create_existing_fails(store):
    store.create("dup", _writer("x"))
    with pytest.raises(TemplateStoreError, match="already exists"):
        store.create("dup", _writer("y"))
    assert store.read("dup") == "x"


def test_edit(store):
    store.create("t", _writer("old"))
    store.edit("t", _writer("new"))
    assert store.read("t") == "new"


def test_edit_missing(store):
    with pytest.raises(TemplateStoreError, match="not found"):
        store.edit("nope", _writer("x"))


def test_remove(store):
    store.create("t", _writer("x"))
    path = store.remove("t")
    assert not path.exists()
    with pytest.raises(TemplateStoreError, match="not found"):
        store.remove("t")


def test_resolve_prefers_local_file(store, tmp_path):
    store.create("greet", _writer("stored"))
    (tmp_path / "greet").write_text("local", encoding="utf-8")
    assert store.resolve("greet") == Path("greet")
    assert store.read("greet") == "local"


def test_resolve_falls_back_to_store(store):
    store.create("greet", _writer("stored"))
    assert store.resolve("greet") == store.path_for("greet")


def test_resolve_relative_path(store, tmp_path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "t.txt").write_text("hi", encoding="utf-8")
    assert store.read("sub/t.txt") == "hi"


@pytest.mark.parametrize("name", ["missing", "sub/missing.tpl"])
def test_resolve_not_found(store, name):
    with pytest.raises(TemplateStoreError, match="not found locally or in the global template directory"):
        store.resolve(name)


def test_lookups_do_not_create_the_directory(store):
    with pytest.raises(TemplateStoreError):
        store.read("missing")
    store.path_for("greet")
    with pytest.raises(TemplateStoreError, match="not found"):
        store.edit("missing", _writer("x"))
    assert not store.root.exists()


def test_create_makes_the_directory(store):
    assert not store.root.exists()
    assert store.create("first", _writer("x"))
    assert (store.root / "first.tpl").is_file()


def test_default_extension_matches_config():
    assert TemplateStore(Path("unused")).extension == RuntplConfig().template_extension
