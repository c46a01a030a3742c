import logging
import sys
import uuid

import pytest

from plugcfg.config.settings import Settings
from plugcfg.core.host import LoggingHost
from plugcfg.core.orchestrator import ISSUES_FOUND_MESSAGE, ConfigOrchestrator
from plugcfg.config.source import StaticConfigSource
from plugcfg.plugins.base import PluginSpec
from tests.helpers import FakePluginModule


def test_bundle_without_module_falls_back_to_members(make_orchestrator, resolver, recorder, host, state):
    resolver.register("plugins.a", recorder.unit("plugins.a"))
    resolver.register("plugins.b", recorder.unit("plugins.b"))
    orch = make_orchestrator(
        {
            "plugins": {"a": "1.0", "b": "1.0"},
            "bundles": {"ab": {"items": ["a", "b"]}},
        }
    )

    orch.setup()

    assert recorder.calls == ["plugins.a", "plugins.b"]
    assert state.configured == {"a", "b"}
    assert any("no specified configuration file" in m for m in host.messages(logging.WARNING))
    assert ISSUES_FOUND_MESSAGE not in host.messages()


def test_loaded_bundle_configures_members(make_orchestrator, resolver, recorder, state):
    resolver.register("plugins.ab", recorder.unit("plugins.ab"))
    resolver.register("plugins.a", recorder.unit("plugins.a"))
    orch = make_orchestrator(
        {
            "plugins": {"a": "1.0", "b": "1.0", "c": "1.0"},
            "bundles": {"ab": {"items": ["a", "b"]}},
        }
    )

    orch.setup()

    assert recorder.calls == ["plugins.ab"]
    assert state.configured == {"a", "b", "c"}


def test_failed_bundle_is_reported_once(make_orchestrator, resolver, recorder, host, state):
    resolver.register("plugins.ab", recorder.failing("plugins.ab"))
    resolver.register("plugins.a", recorder.unit("plugins.a"))
    orch = make_orchestrator(
        {
            "plugins": {"a": "1.0", "b": "1.0"},
            "bundles": {"ab": {"items": ["a", "b"]}},
        }
    )

    orch.setup()

    assert recorder.calls == ["plugins.ab", "plugins.a"]
    assert state.configured == {"a", "b"}
    assert orch.errors_found()
    assert host.messages(logging.WARNING).count(ISSUES_FOUND_MESSAGE) == 1


def test_bundle_with_unknown_member_is_skipped(make_orchestrator, resolver, recorder, host):
    resolver.register("plugins.broken", recorder.unit("plugins.broken"))
    resolver.register("plugins.good", recorder.unit("plugins.good"))
    orch = make_orchestrator(
        {
            "plugins": {"a": "1.0"},
            "bundles": {
                "broken": {"items": ["a", "typo"]},
                "good": {"items": ["a"]},
            },
        }
    )

    orch.setup()

    assert "plugins.broken" not in recorder.calls
    assert "plugins.good" in recorder.calls
    [error] = host.messages(logging.ERROR)
    assert "Bundle 'broken' has invalid plugin 'typo'" in error


def test_lazy_plugins_are_skipped_by_default(make_orchestrator, resolver, recorder, state):
    resolver.register("plugins.lazy", recorder.unit("plugins.lazy"))
    resolver.register("plugins.mixed", recorder.unit("plugins.mixed"))
    orch = make_orchestrator(
        {
            "plugins": {"lazy": {"version": "1.0", "opt": True}, "eager": "1.0"},
            "bundles": {"mixed": {"items": ["lazy", "eager"]}},
        }
    )

    orch.setup()

    assert recorder.calls == []
    assert state.configured == {"eager"}


def test_lazy_plugins_load_when_enabled(make_orchestrator, resolver, recorder, state):
    resolver.register("plugins.lazy", recorder.unit("plugins.lazy"))
    orch = make_orchestrator(
        {
            "config": {"load_opt_plugins": True},
            "plugins": {"lazy": {"version": "1.0", "opt": True}},
        }
    )

    orch.setup()

    assert recorder.calls == ["plugins.lazy"]


def test_lazy_plugin_configured_on_demand(make_orchestrator, resolver, recorder):
    resolver.register("plugins.lazy", recorder.unit("plugins.lazy"))
    orch = make_orchestrator({"plugins": {"lazy": {"version": "1.0", "opt": True}}})

    orch.setup()
    orch.configure("lazy")
    orch.configure("lazy")

    assert recorder.calls == ["plugins.lazy"]


def test_configure_unknown_plugin_notifies(make_orchestrator, host, state):
    orch = make_orchestrator({"plugins": {}})

    orch.configure("ghost")

    assert host.messages(logging.ERROR) == ["Plugin ghost not found in the configuration document"]
    assert not state.is_configured("ghost")


def test_configure_spec_with_explicit_config(make_orchestrator, resolver, recorder):
    resolver.register("custom.plugins.foo", recorder.unit("custom.plugins.foo"))
    orch = make_orchestrator({})
    document = orch.get_config()
    document.config.plugins_dir = "custom.plugins/"

    orch.configure(PluginSpec(name="foo"), document)

    assert recorder.calls == ["custom.plugins.foo"]


def test_plugins_dir_is_normalized_before_use(make_orchestrator, resolver, recorder):
    resolver.register("lua.plugins.foo", recorder.unit("lua.plugins.foo"))
    orch = make_orchestrator({"config": {"plugins_dir": "lua.plugins///"}, "plugins": {"foo": "1"}})

    orch.setup()

    assert recorder.calls == ["lua.plugins.foo"]


def test_rocks_table_is_configured_too(make_orchestrator, resolver, recorder):
    resolver.register("plugins.foo", recorder.unit("plugins.foo"))
    resolver.register("plugins.bar", recorder.unit("plugins.bar"))
    orch = make_orchestrator({"plugins": {"foo": "1"}, "rocks": {"bar": "1"}})

    orch.setup()

    assert recorder.calls == ["plugins.foo", "plugins.bar"]


def test_setup_with_explicit_plugin_set(make_orchestrator, resolver, recorder):
    resolver.register("plugins.foo", recorder.unit("plugins.foo"))
    resolver.register("plugins.bar", recorder.unit("plugins.bar"))
    orch = make_orchestrator({"plugins": {"foo": "1", "bar": "1"}})

    orch.setup(["bar"])

    assert recorder.calls == ["plugins.bar"]


def test_setup_accepts_mapping_of_specs(make_orchestrator, resolver):
    plugin_module = FakePluginModule()
    resolver.register("foo", lambda: plugin_module)
    orch = make_orchestrator({"config": {"auto_setup": True}})

    orch.setup({"foo": PluginSpec(name="foo"), "bar": {"config": False}})

    assert plugin_module.setup_calls == [()]


def test_options_and_colorscheme_are_applied(make_orchestrator, host):
    orch = make_orchestrator(
        {"config": {"options": {"number": True, "tabstop": 4}, "colourscheme": "gruvbox"}}
    )

    orch.setup()

    assert host.options == {"number": True, "tabstop": 4}
    assert host.colorscheme == "gruvbox"


def test_unknown_colorscheme_is_ignored(resolver, state):
    host = LoggingHost(colorschemes=["default"])
    orch = ConfigOrchestrator(
        StaticConfigSource({"config": {"colorscheme": "missing"}}), resolver, host, state
    )

    orch.setup()

    assert host.colorscheme is None
    assert host.messages() == []


class ExplodingHost(LoggingHost):
    def apply_colorscheme(self, name):
        raise RuntimeError("renderer crashed")


def test_other_colorscheme_errors_propagate(resolver, state):
    orch = ConfigOrchestrator(
        StaticConfigSource({"config": {"colorscheme": "x"}}), resolver, ExplodingHost(), state
    )

    with pytest.raises(RuntimeError):
        orch.setup()


def test_load_bundle_by_name(make_orchestrator, resolver, recorder, state):
    resolver.register("plugins.ab", recorder.unit("plugins.ab"))
    orch = make_orchestrator(
        {"plugins": {"a": "1", "b": "1"}, "bundles": {"ab": {"items": ["a", "b"]}}}
    )

    assert orch.load_bundle("ab")
    assert state.configured == {"a", "b"}


def test_load_unknown_bundle_notifies_when_operation_ends(make_orchestrator, host):
    orch = make_orchestrator({"bundles": {"ab": {"items": ["missing"]}}})

    assert not orch.load_bundle("nope")
    assert host.pending == 0
    assert not orch.load_bundle("ab")
    assert host.pending == 0

    errors = host.messages(logging.ERROR)
    assert errors[0] == "Bundle 'nope' not found."
    assert "invalid plugin 'missing'" in errors[1]


def test_get_bundle(make_orchestrator):
    orch = make_orchestrator(
        {
            "plugins": {"a": "1", "b": "1", "c": "1"},
            "bundles": {"ab": {"items": ["a", "b"]}, "bad": {"items": "c"}},
        }
    )

    assert orch.get_bundle("b") == ("ab", ["a", "b"])
    assert orch.get_bundle(PluginSpec(name="a")) == ("ab", ["a", "b"])
    assert orch.get_bundle("c") == (None, None)


def test_errors_accumulate_across_runs(make_orchestrator, resolver, recorder, host):
    resolver.register("plugins.foo", recorder.failing("plugins.foo"))
    orch = make_orchestrator({"plugins": {"foo": "1"}})

    orch.setup()
    orch.setup()

    assert recorder.count("plugins.foo") == 1
    assert len(orch.health_report().failed_to_load) == 1
    assert host.messages(logging.WARNING).count(ISSUES_FOUND_MESSAGE) == 2


def test_setup_from_settings_reports_invalid_bundle_config(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "path", list(sys.path))
    config_file = tmp_path / "plugins.toml"
    config_file.write_text(
        f'[config]\nplugins_dir = "cfg_{uuid.uuid4().hex}"\n\n'
        '[plugins]\na = "1"\n\n'
        "[bundles.ui]\nitems = [\"a\"]\nconfig = 42\n"
    )
    host = LoggingHost()
    orch = ConfigOrchestrator.from_settings(
        Settings(config_file=config_file, search_paths=[tmp_path]), host=host
    )

    orch.setup()

    assert host.pending == 0
    [error] = host.messages(logging.ERROR)
    assert "Bundle 'ui' has invalid `config` variable" in error
    assert "got int" in error
    assert any("no specified configuration file" in m for m in host.messages(logging.WARNING))


def test_configure_delivers_deferred_notifications(make_orchestrator, host):
    orch = make_orchestrator({"plugins": {"a": "1"}})
    host.schedule(lambda: host.notify("later", logging.INFO))

    orch.configure("a")

    assert host.pending == 0
    assert host.messages(logging.INFO) == ["later"]


def test_blank_plugin_name_does_not_abort_setup(make_orchestrator, resolver, recorder, state):
    resolver.register("plugins.good", recorder.unit("plugins.good"))
    orch = make_orchestrator({"plugins": {"": "1", "good": "1"}, "rocks": {" ": "1"}})

    orch.setup()

    assert recorder.calls == ["plugins.good"]
    assert state.configured == {"good"}


def test_blank_names_in_supplied_plugins_are_skipped(make_orchestrator, resolver, recorder, state):
    resolver.register("plugins.good", recorder.unit("plugins.good"))
    orch = make_orchestrator({"plugins": {"good": "1"}})

    orch.setup(["", "good"])
    orch.setup({"": "1"})

    assert recorder.calls == ["plugins.good"]
    assert state.configured == {"good"}


def test_bundle_with_blank_member_is_reported(make_orchestrator, host):
    orch = make_orchestrator({"plugins": {"": "1"}, "bundles": {"ui": {"items": [""]}}})

    orch.setup()

    assert any("invalid plugin ''" in m for m in host.messages(logging.ERROR))
