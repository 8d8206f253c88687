"""
LoggerFactory unit tests

Construction rules (default channel, disabled channels, all-or-nothing),
channel registry operations and the select-once-then-reset logging facade.
"""

from __future__ import annotations

import pytest

from logfactory import (
    Channel,
    ChannelConfig,
    ChannelNotFoundError,
    FormatterConstructionError,
    HandlerConstructionError,
    InvalidConfigurationError,
    InvalidLevelError,
    Level,
    LoggerFactory,
    LoggerFactorySettings,
    ProcessorConstructionError,
)
from logfactory.components import ComponentRegistry, FileSink, MemorySink
from logfactory.factory import resolve_default_channel


def _sink(factory: LoggerFactory, channel: str, index: int = 0) -> MemorySink:
    return factory.get_channel(channel).sinks[index]


class TestConstruction:
    """Factory construction"""

    def test_default_channel_is_recorded(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        assert factory.get_default_channel_name() == "App"
        assert factory.get_current_channel_name() == "App"

    def test_no_default_channel_fails(self, settings) -> None:
        config = {"App": {"handlers": {"MemorySink": {}}}, "Dev": {}}
        with pytest.raises(InvalidConfigurationError, match="no default channel"):
            LoggerFactory(config, settings=settings)

    def test_default_on_disabled_channel_does_not_count(self, settings) -> None:
        config = {"App": {"default": True, "enabled": False}, "Dev": {}}
        with pytest.raises(InvalidConfigurationError):
            LoggerFactory(config, settings=settings)

    def test_multiple_defaults_rejected_by_default(self, settings) -> None:
        config = {"A": {"default": True}, "B": {"default": True}}
        with pytest.raises(InvalidConfigurationError) as exc_info:
            LoggerFactory(config, settings=settings)
        assert exc_info.value.details["channels"] == ["A", "B"]

    def test_multiple_defaults_last_wins_when_configured(self) -> None:
        settings = LoggerFactorySettings(_env_file=None, default_policy="last")
        factory = LoggerFactory({"A": {"default": True}, "B": {"default": True}}, settings=settings)
        assert factory.get_default_channel_name() == "B"

    def test_disabled_channel_is_never_registered(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        assert factory.is_channel("Legacy") is False
        with pytest.raises(ChannelNotFoundError):
            factory.get_channel("Legacy")
        assert factory.channel_names() == ["App", "Audit"]

    def test_disabled_channel_with_unknown_types_is_not_built(self, settings) -> None:
        config = {
            "App": {"default": True},
            "Broken": {"enabled": False, "handlers": {"NoSuchSink": {}}},
        }
        factory = LoggerFactory(config, settings=settings)
        assert not factory.is_channel("Broken")

    def test_channel_without_handlers_is_legal(self, settings) -> None:
        factory = LoggerFactory({"App": {"default": True}}, settings=settings)
        factory.info("dropped")
        assert factory.get_channel("App").sinks == ()

    @pytest.mark.parametrize(
        "channel_options, error",
        [
            ({"handlers": {"NoSuchSink": {}}}, HandlerConstructionError),
            ({"handlers": {"MemorySink": {"formatter": {"name": "NoSuchFormatter"}}}}, FormatterConstructionError),
            ({"processors": {"NoSuchProcessor": {}}}, ProcessorConstructionError),
        ],
    )
    def test_unknown_component_types_raise_category_errors(self, settings, channel_options, error) -> None:
        config = {"App": {"default": True, **channel_options}}
        with pytest.raises(error):
            LoggerFactory(config, settings=settings)

    def test_construction_is_all_or_nothing(self, tmp_path, settings) -> None:
        """A failure in a later channel closes the sinks already opened."""
        opened = []

        registry = ComponentRegistry.with_builtins()

        @registry.register_sink("TrackedFileSink")
        def tracked(path):
            sink = FileSink(path)
            opened.append(sink)
            return sink

        config = {
            "App": {"default": True, "handlers": {"TrackedFileSink": {"params": [str(tmp_path / "a.log")]}}},
            "Bad": {"handlers": {"NoSuchSink": {}}},
        }
        with pytest.raises(HandlerConstructionError):
            LoggerFactory(config, registry=registry, settings=settings)
        assert len(opened) == 1
        assert opened[0]._file.closed

    def test_accepts_prebuilt_channel_configs(self, settings) -> None:
        configs = [ChannelConfig(name="App", default=True), ChannelConfig(name="Dev")]
        factory = LoggerFactory(configs, settings=settings)
        assert factory.channel_names() == ["App", "Dev"]

    def test_duplicate_channel_configs_rejected(self, settings) -> None:
        configs = [ChannelConfig(name="App", default=True), ChannelConfig(name="App")]
        with pytest.raises(InvalidConfigurationError, match="duplicate"):
            LoggerFactory(configs, settings=settings)

    def test_from_file(self, tmp_path, settings) -> None:
        path = tmp_path / "channels.json"
        path.write_text('{"App": {"default": true, "handlers": {"MemorySink": {}}}}')
        factory = LoggerFactory.from_file(path, settings=settings)
        assert factory.get_default_channel_name() == "App"

    def test_from_settings_requires_config_file(self, settings) -> None:
        with pytest.raises(InvalidConfigurationError, match="no config file"):
            LoggerFactory.from_settings(settings)


class TestResolveDefaultChannel:
    """Default channel resolution"""

    def test_single_default(self) -> None:
        channels = [ChannelConfig(name="a"), ChannelConfig(name="b", default=True)]
        assert resolve_default_channel(channels) == "b"

    def test_last_policy_picks_last(self) -> None:
        channels = [ChannelConfig(name="a", default=True), ChannelConfig(name="b", default=True)]
        assert resolve_default_channel(channels, "last") == "b"

    def test_disabled_defaults_are_ignored(self) -> None:
        channels = [ChannelConfig(name="a", default=True, enabled=False), ChannelConfig(name="b", default=True)]
        assert resolve_default_channel(channels) == "b"


class TestChannelOperations:
    """add_channel / get_channel / is_channel"""

    def test_add_channel_registers_new_channel(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        channel = Channel("Extra", [MemorySink()])
        assert factory.add_channel(channel) is factory
        assert factory.is_channel("Extra")
        assert factory.get_channel("Extra") is channel

    def test_add_channel_overwrites_existing(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        replacement = Channel("App", [MemorySink()])
        factory.add_channel(replacement)
        assert factory.get_channel("App") is replacement

        factory.info("routed to replacement")
        assert replacement.sinks[0].records[0]["event"] == "routed to replacement"

    def test_add_channel_rejects_non_channels(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        with pytest.raises(TypeError):
            factory.add_channel("App")

    def test_get_channel_without_name_returns_current(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        assert factory.get_channel().name == "App"
        factory.select_channel("Audit")
        assert factory.get_channel().name == "Audit"

    def test_get_unknown_channel_raises(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        with pytest.raises(ChannelNotFoundError) as exc_info:
            factory.get_channel("Missing")
        assert exc_info.value.channel == "Missing"
        assert exc_info.value.code == "CHANNEL_NOT_FOUND"

    def test_is_channel_never_raises(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        assert factory.is_channel("App") is True
        assert factory.is_channel("Missing") is False


class TestSelection:
    """select_channel and the reset after every logging call"""

    def test_select_routes_exactly_one_event(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        factory.select_channel("Audit").warning("once")
        factory.warning("back to default")

        audit_events = [r["event"] for r in _sink(factory, "Audit").records]
        app_events = [r["event"] for r in _sink(factory, "App").records]
        assert audit_events == ["once"]
        assert app_events == ["back to default"]
        assert factory.get_current_channel_name() == factory.get_default_channel_name()

    def test_select_unknown_channel_leaves_state_unchanged(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        factory.select_channel("Audit")
        with pytest.raises(ChannelNotFoundError):
            factory.select_channel("Missing")
        assert factory.get_current_channel_name() == "Audit"

    def test_channel_alias(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        factory.channel("Audit").error("via alias")
        assert _sink(factory, "Audit").records[0]["event"] == "via alias"

    def test_reset_happens_when_sink_raises(self, settings) -> None:
        class ExplodingSink(MemorySink):
            def emit(self, level, event_dict):
                raise OSError("disk full")

        factory = LoggerFactory({"App": {"default": True}}, settings=settings)
        factory.add_channel(Channel("Fragile", [ExplodingSink()]))

        factory.select_channel("Fragile")
        with pytest.raises(OSError, match="disk full"):
            factory.error("boom")
        assert factory.get_current_channel_name() == "App"

    def test_reset_happens_on_invalid_level(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        factory.select_channel("Audit")
        with pytest.raises(InvalidLevelError):
            factory.log("verbose", "nope")
        assert factory.get_current_channel_name() == "App"
        assert _sink(factory, "Audit").records == []

    def test_using_does_not_touch_selection(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        factory.select_channel("Audit")
        factory.using("App").info("explicit", request_id="r-1")
        assert factory.get_current_channel_name() == "Audit"
        record = _sink(factory, "App").records[0]
        assert record["request_id"] == "r-1"

    def test_shared_selection_scope(self, memory_config) -> None:
        settings = LoggerFactorySettings(_env_file=None, selection_scope="shared")
        factory = LoggerFactory(memory_config, settings=settings)
        factory.select_channel("Audit")
        assert factory.get_current_channel_name() == "Audit"
        factory.notice("shared")
        assert factory.get_current_channel_name() == "App"


class TestLeveledMethods:
    """One method per severity plus log()"""

    @pytest.mark.parametrize("level", list(Level))
    def test_each_level_method(self, memory_config, settings, level) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        getattr(factory, level.method_name)("message", {"key": "value"})

        record = _sink(factory, "App").records[0]
        assert record["event"] == "message"
        assert record["level"] == level.method_name
        assert record["level_no"] == int(level)
        assert record["channel"] == "App"
        assert record["key"] == "value"
        assert "timestamp" in record

    @pytest.mark.parametrize("level", ["warning", "WARNING", 300, Level.WARNING])
    def test_log_accepts_level_spellings(self, memory_config, settings, level) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        factory.log(level, "generic")
        assert _sink(factory, "App").records[0]["level"] == "warning"

    @pytest.mark.parametrize("level", ["verbose", 301, None, True])
    def test_log_rejects_unknown_levels(self, memory_config, settings, level) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        with pytest.raises(InvalidLevelError):
            factory.log(level, "generic")

    def test_leveled_methods_return_none(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        assert factory.info("x") is None

    def test_sink_level_threshold(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        factory.select_channel("Audit").info("below notice")
        factory.select_channel("Audit").notice("at notice")
        records = _sink(factory, "Audit").records
        assert [r["event"] for r in records] == ["at notice"]
        assert records[0]["tags"] == ["audit"]

    def test_context_keys_do_not_clash_with_arguments(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        factory.info("msg", {"level_hint": 1, "message": "ctx message"})
        record = _sink(factory, "App").records[0]
        assert record["event"] == "msg"
        assert record["message"] == "ctx message"

    def test_context_with_non_string_keys(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        factory.info("x", {0: "first", 1: "second", "user": "bob"})

        record = _sink(factory, "App").records[0]
        assert record[0] == "first"
        assert record[1] == "second"
        assert record["user"] == "bob"
        assert _sink(factory, "App").lines[0].endswith('x {"0":"first","1":"second","user":"bob"}')

    def test_pipeline_keys_in_context_are_kept_aside(self, memory_config, settings) -> None:
        factory = LoggerFactory(memory_config, settings=settings)
        factory.warning(
            "msg",
            {"event": "signup", "level": "x", "level_no": 1, "channel": "Other", "timestamp": "yesterday"},
        )

        record = _sink(factory, "App").records[0]
        assert record["event"] == "msg"
        assert record["level"] == "warning"
        assert record["level_no"] == 300
        assert record["channel"] == "App"
        assert record["timestamp"] != "yesterday"
        assert record["context_event"] == "signup"
        assert record["context_level"] == "x"
        assert record["context_level_no"] == 1
        assert record["context_channel"] == "Other"
        assert record["context_timestamp"] == "yesterday"

    def test_params_of_wrong_shape_raise_category_error(self, settings) -> None:
        config = {"App": {"default": True, "handlers": {"StdioSink": {"params": "json"}}}}
        with pytest.raises(HandlerConstructionError, match="params must be a list or a mapping"):
            LoggerFactory(config, settings=settings)


class TestScenarios:
    """End-to-end scenarios"""

    def test_app_dev_scenario(self, settings) -> None:
        config = {
            "App": {"default": True, "enabled": True, "handlers": {}},
            "Dev": {"enabled": True, "handlers": {}},
        }
        factory = LoggerFactory(config, settings=settings)
        assert factory.get_default_channel_name() == "App"

        factory.select_channel("Dev").info("x")
        assert factory.get_current_channel_name() == "App"

        with pytest.raises(ChannelNotFoundError):
            factory.select_channel("Missing")
        assert factory.get_current_channel_name() == "App"

    def test_sink_order_matches_configuration(self, settings) -> None:
        config = {
            "App": {
                "default": True,
                "handlers": [
                    {"type": "MemorySink"},
                    {"type": "MemorySink"},
                    {"type": "MemorySink"},
                ],
            }
        }
        factory = LoggerFactory(config, settings=settings)
        order = []
        for index, sink in enumerate(factory.get_channel("App").sinks):
            original = sink.emit

            def tracking_emit(level, event_dict, _index=index, _original=original):
                order.append(_index)
                _original(level, event_dict)

            sink.emit = tracking_emit

        factory.info("ordered")
        assert order == [0, 1, 2]

    def test_non_bubbling_sink_halts_propagation(self, settings) -> None:
        config = {
            "App": {
                "default": True,
                "handlers": [
                    {"type": "MemorySink", "params": {"bubble": False, "level": "error"}},
                    {"type": "MemorySink"},
                ],
            }
        }
        factory = LoggerFactory(config, settings=settings)
        factory.error("stops at first")
        factory.info("passes through")

        first, second = factory.get_channel("App").sinks
        assert [r["event"] for r in first.records] == ["stops at first"]
        assert [r["event"] for r in second.records] == ["passes through"]

    def test_formatter_bound_to_sink(self, settings) -> None:
        config = {
            "App": {
                "default": True,
                "handlers": {
                    "MemorySink": {
                        "formatter": {"name": "LineFormatter", "params": {"fmt": "{channel}|{level}|{message}"}},
                    }
                },
            }
        }
        factory = LoggerFactory(config, settings=settings)
        factory.critical("formatted")
        assert _sink(factory, "App").lines == ["App|CRITICAL|formatted"]

    def test_context_manager_closes_file_sinks(self, tmp_path, settings) -> None:
        log_path = tmp_path / "app.log"
        config = {"App": {"default": True, "handlers": {"FileSink": {"params": {"path": str(log_path)}}}}}
        with LoggerFactory(config, settings=settings) as factory:
            factory.info("written")
            sink = factory.get_channel("App").sinks[0]
        assert sink._file.closed
        assert '"message":"written"' in log_path.read_text()
