from __future__ import annotations

import pytest

from skinmanager.plugins.events import PluginEventArgs, PluginEventBus, PluginEventType


@pytest.mark.asyncio
async def test_emit_reaches_matching_handlers_only():
    bus = PluginEventBus()
    loaded: list[str] = []
    deleted: list[str] = []

    async def on_loaded(args: PluginEventArgs) -> None:
        loaded.append(args.data["sha"])

    bus.register_handler(PluginEventType.MOD_LOADED, on_loaded)
    bus.register_handler(PluginEventType.MOD_DELETED, lambda args: deleted.append(args.data["sha"]))

    await bus.emit(PluginEventArgs(PluginEventType.MOD_LOADED, data={"sha": "abc"}))
    assert loaded == ["abc"]
    assert deleted == []


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others():
    bus = PluginEventBus()
    seen: list[PluginEventType] = []

    def broken(args: PluginEventArgs) -> None:
        raise RuntimeError("handler bug")

    bus.register_handler(PluginEventType.APPLICATION_STARTED, broken)
    bus.register_handler(PluginEventType.APPLICATION_STARTED, lambda args: seen.append(args.event_type))
    await bus.emit(PluginEventArgs(PluginEventType.APPLICATION_STARTED))
    assert seen == [PluginEventType.APPLICATION_STARTED]


def test_registration_ids_are_unique_and_removable():
    bus = PluginEventBus()
    first = bus.register_handler(PluginEventType.MOD_IMPORTED, lambda args: None)
    second = bus.register_handler(PluginEventType.MOD_IMPORTED, lambda args: None)
    assert first != second
    assert first.startswith("mod_imported_")
    assert bus.handler_count(PluginEventType.MOD_IMPORTED) == 2
    assert bus.unregister_handler(first) is True
    assert bus.unregister_handler(first) is False
    assert bus.handler_count() == 1


def test_non_callable_handler_rejected():
    with pytest.raises(ValueError):
        PluginEventBus().register_handler(PluginEventType.MOD_LOADED, "nope")  # type: ignore[arg-type]


def test_event_timestamp_is_utc():
    args = PluginEventArgs(PluginEventType.CUSTOM_EVENT, event_name="x")
    assert args.timestamp.tzinfo is not None
