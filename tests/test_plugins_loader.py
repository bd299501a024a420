"""Tests for skinmanager.plugins.loader and discovery."""

from __future__ import annotations

from pathlib import Path

from skinmanager.plugins.discovery import MANIFEST_FILENAME, get_plugin_roots
from skinmanager.plugins.loader import PluginLoader, plugin_enabled

PLUGIN_SOURCE = '''
from skinmanager.messaging import MessageResponse


class EchoPlugin:
    id = "{plugin_id}"
    name = "Echo"
    version = "1.2.3"
    description = "echoes payloads"
    author = "tests"

    async def initialize(self, context):
        self.context = context

    async def shutdown(self):
        pass

    def get_handled_message_types(self):
        return {types!r}

    async def handle_message(self, request):
        return MessageResponse.create_success(request.id, request.payload)


plugin = EchoPlugin()
'''


def _source(plugin_id: str, types: set[str]) -> str:
    return PLUGIN_SOURCE.format(plugin_id=plugin_id, types=set(types))


def _config(*paths: Path, **plugins) -> dict:
    return {"plugins": {"load": {"paths": [str(p) for p in paths]}, **plugins}}


def test_plugin_enabled_rules():
    assert plugin_enabled("a", {})
    assert not plugin_enabled("a", {"enabled": False})
    assert not plugin_enabled("a", {"deny": ["a"]})
    assert not plugin_enabled("b", {"allow": ["a"]})
    assert not plugin_enabled("a", {"entries": {"a": {"enabled": False}}})
    assert not plugin_enabled("a", {"allow": ["a"], "deny": ["a"]})


def test_discovery_accepts_parent_dir_and_dedupes(tmp_path: Path, write_native_plugin):
    root = write_native_plugin("one", {"id": "one"}, _source("one", {"ONE"}))
    roots = get_plugin_roots(None, _config(root.parent, root, root / MANIFEST_FILENAME))
    assert roots == [root.resolve()]


def test_discovery_includes_data_dir_plugins(tmp_path: Path, write_native_plugin):
    data_dir = tmp_path / "data"
    root = write_native_plugin("inner", {"id": "inner"}, _source("inner", {"IN"}), parent=data_dir / "plugins")
    assert get_plugin_roots(data_dir, {}) == [root.resolve()]


def test_load_valid_plugin(write_native_plugin):
    root = write_native_plugin(
        "echo",
        {"id": "tests.echo", "capabilities": {"events": True, "data": False}},
        _source("tests.echo", {"ECHO"}),
    )
    result = PluginLoader().load(None, _config(root))
    assert result.diagnostics == []
    assert len(result.plugins) == 1
    loaded = result.plugins[0]
    assert loaded.plugin.id == "tests.echo"
    assert loaded.capabilities == ["events"]
    assert loaded.source == str(root.resolve())


def test_load_class_entry_is_instantiated(write_native_plugin):
    root = write_native_plugin(
        "cls", {"id": "tests.cls", "entry": "plugin.py:EchoPlugin"}, _source("tests.cls", {"CLS"})
    )
    result = PluginLoader().load(None, _config(root))
    assert result.plugins[0].plugin.get_handled_message_types() == {"CLS"}


def test_missing_id_reported(write_native_plugin):
    root = write_native_plugin("noid", {"name": "No id"}, _source("x", {"X"}))
    result = PluginLoader().load(None, _config(root))
    assert result.plugins == []
    assert result.diagnostics[0]["code"] == "PLUGIN_MANIFEST_INVALID"


def test_broken_entry_does_not_stop_others(write_native_plugin):
    bad = write_native_plugin("bad", {"id": "tests.bad"}, "raise RuntimeError('import failed')\n")
    good = write_native_plugin("good", {"id": "tests.good"}, _source("tests.good", {"GOOD"}))
    result = PluginLoader().load(None, _config(bad, good))
    assert [p.plugin.id for p in result.plugins] == ["tests.good"]
    assert result.records[0].id == "tests.bad"
    assert result.records[0].state == "failed"
    assert "import failed" in (result.records[0].error or "")
    assert [d["code"] for d in result.diagnostics] == ["PLUGIN_LOAD_FAILED"]


def test_contract_violation_reported(write_native_plugin):
    root = write_native_plugin("shape", {"id": "tests.shape"}, "plugin = object()\n")
    result = PluginLoader().load(None, _config(root))
    assert result.plugins == []
    assert "contract" in result.diagnostics[0]["message"]


def test_id_mismatch_reported(write_native_plugin):
    root = write_native_plugin("mismatch", {"id": "tests.manifest"}, _source("tests.code", {"M"}))
    result = PluginLoader().load(None, _config(root))
    assert result.plugins == []
    assert "does not match manifest id" in result.diagnostics[0]["message"]


def test_duplicate_manifest_id_keeps_first(tmp_path: Path, write_native_plugin):
    first = write_native_plugin("a", {"id": "tests.dup"}, _source("tests.dup", {"DUP_A"}))
    second = write_native_plugin("b", {"id": "tests.dup"}, _source("tests.dup", {"DUP_B"}))
    result = PluginLoader().load(None, _config(first, second))
    assert len(result.plugins) == 1
    assert result.plugins[0].source == str(first.resolve())
    assert result.diagnostics[0]["code"] == "PLUGIN_DUPLICATE_ID"


def test_message_type_conflict_is_diagnosed(write_native_plugin):
    a = write_native_plugin("a", {"id": "tests.a"}, _source("tests.a", {"SHARED"}))
    b = write_native_plugin("b", {"id": "tests.b"}, _source("tests.b", {"SHARED"}))
    result = PluginLoader().load(None, _config(a, b))
    assert len(result.plugins) == 2
    assert [d["code"] for d in result.diagnostics] == ["PLUGIN_CONFLICT_MESSAGE_TYPE"]


def test_disabled_plugin_skipped(write_native_plugin):
    root = write_native_plugin("off", {"id": "tests.off"}, _source("tests.off", {"OFF"}))
    result = PluginLoader().load(None, _config(root, deny=["tests.off"]))
    assert result.plugins == [] and result.diagnostics == []


def test_doctor_reports_counts_and_isolation(tmp_path: Path, write_native_plugin):
    good = write_native_plugin("good", {"id": "tests.good"}, _source("tests.good", {"GOOD"}))
    sneaky = write_native_plugin(
        "sneaky",
        {"id": "tests.sneaky"},
        "from skinmanager.host import SkinManagerHost\n" + _source("tests.sneaky", {"SNEAKY"}),
    )
    report = PluginLoader().doctor(tmp_path, _config(good, sneaky))
    assert report["checks"]["dataDirExists"] is True
    assert report["checks"]["discoveredCount"] == 2
    assert report["checks"]["loadedCount"] == 2
    assert report["checks"]["errorCount"] == 0
    isolation = [d for d in report["diagnostics"] if d["code"] == "PLUGIN_ISOLATION"]
    assert len(isolation) == 1
    assert isolation[0]["pluginId"] == "tests.sneaky"
    assert "forbidden-host-import: skinmanager.host" in isolation[0]["message"]


def test_unparseable_manifest_is_reported(write_native_plugin):
    broken = write_native_plugin("broken", {}, _source("tests.broken", {"BROKEN"}))
    (broken / MANIFEST_FILENAME).write_text("{not json", encoding="utf-8")
    listed = write_native_plugin("listed", {}, _source("tests.listed", {"LISTED"}))
    (listed / MANIFEST_FILENAME).write_text("[1]", encoding="utf-8")
    good = write_native_plugin("good", {"id": "tests.good"}, _source("tests.good", {"GOOD"}))

    result = PluginLoader().load(None, _config(broken, listed, good))

    assert [p.plugin.id for p in result.plugins] == ["tests.good"]
    assert [d["code"] for d in result.diagnostics] == ["PLUGIN_MANIFEST_INVALID"] * 2
    assert [d["pluginId"] for d in result.diagnostics] == ["broken", "listed"]
    assert [r.state for r in result.records] == ["failed", "failed"]
    assert "must be a JSON object" in (result.records[1].error or "")


def test_same_module_name_in_two_roots_loads_both(write_native_plugin):
    roots = []
    for name in ("first", "second"):
        plugin_id = f"tests.{name}"
        root = write_native_plugin(name, {"id": plugin_id, "entry": "shared_entry_mod:plugin"}, "")
        (root / "shared_entry_mod.py").write_text(_source(plugin_id, {name.upper()}), encoding="utf-8")
        roots.append(root)

    result = PluginLoader().load(None, _config(*roots))

    assert result.diagnostics == []
    assert [p.plugin.id for p in result.plugins] == ["tests.first", "tests.second"]
    assert result.plugins[1].plugin.get_handled_message_types() == {"SECOND"}
