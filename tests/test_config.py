import pytest
from hostkit.hostkit_config import (
    LoaderConfig, load_config, dbg, debug_enabled, color_enabled,
)

# --- YAML loader configuration ---

def test_load_config_strings(tmp_path):
    path = tmp_path / "loader.yaml"
    path.write_text(
        "name: plugins\n"
        "root: /srv/app\n"
        "compiled_path: build;cache\n"
        "source_path: lib\n",
        encoding="utf-8",
    )
    cfg = load_config(str(path))
    assert cfg == LoaderConfig(
        name="plugins", root="/srv/app",
        compiled_path="build;cache", source_path="lib", native_path=None,
    )

def test_load_config_lists_are_joined(tmp_path):
    path = tmp_path / "loader.yaml"
    path.write_text(
        "name: plugins\n"
        "source_path:\n"
        "  - lib\n"
        "  - vendor\n",
        encoding="utf-8",
    )
    cfg = load_config(str(path))
    assert cfg.source_path == "lib;vendor"
    assert cfg.root == ""

def test_load_config_requires_name(tmp_path):
    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(empty))
    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(listing))

def test_from_env(monkeypatch):
    monkeypatch.setenv("HOSTKIT_SOURCE_PATH", "src;lib")
    monkeypatch.delenv("HOSTKIT_COMPILED_PATH", raising=False)
    monkeypatch.delenv("HOSTKIT_NATIVE_PATH", raising=False)
    cfg = LoaderConfig.from_env("envmod", root="/base")
    assert cfg.name == "envmod"
    assert cfg.root == "/base"
    assert cfg.source_path == "src;lib"
    assert cfg.compiled_path is None

# --- Diagnostics ---

def test_dbg_silent_by_default(monkeypatch, capsys):
    monkeypatch.delenv("HOSTKIT_DEBUG", raising=False)
    dbg("hidden")
    assert not debug_enabled()
    assert capsys.readouterr().err == ""

def test_dbg_prints_when_enabled(monkeypatch, capsys):
    monkeypatch.setenv("HOSTKIT_DEBUG", "1")
    dbg("loader", "found", 3)
    assert debug_enabled()
    assert capsys.readouterr().err == "[DBG] loader found 3\n"

def test_color_switches(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("HOSTKIT_NO_COLOR", raising=False)
    assert color_enabled()
    monkeypatch.setenv("NO_COLOR", "1")
    assert not color_enabled()
