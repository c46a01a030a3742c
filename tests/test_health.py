from plugcfg.core.health import build_health_report, format_health_report
from plugcfg.core.state import ConfigState


def test_clean_report():
    state = ConfigState()
    state.mark_configured(["b", "a"])

    report = build_health_report(state)

    assert report.ok
    assert report.configured == ["a", "b"]
    assert format_health_report(report) == [
        "Checking for duplicate configs",
        "  OK No duplicate configs found",
        "Checking for load errors",
        "  OK No errors found",
        "OK Plugin configuration is healthy",
    ]


def test_report_lists_every_problem():
    state = ConfigState()
    state.errors.add_duplicate("telescope.nvim", "telescope")
    state.errors.add_failure("foo", "foo", "RuntimeError: boom")
    state.errors.add_failure("bar", "auto_setup", "KeyError: 'x'")

    report = build_health_report(state)
    lines = format_health_report(report)

    assert not report.ok
    assert report.duplicate_configs_found[0].candidate == "telescope"
    assert [f.plugin for f in report.failed_to_load] == ["foo", "bar"]
    assert "  WARNING Found duplicate configs for telescope.nvim: telescope" in lines
    assert "  ERROR Failed to load foo for foo: RuntimeError: boom" in lines
    assert "  ERROR Failed to load auto_setup for bar: KeyError: 'x'" in lines
    assert lines[-1] == "WARNING 3 issue(s) found"
