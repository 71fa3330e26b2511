"""Tests for skippable test stages."""

from tf_module_tests.runtime.stages import any_stage_skipped, run_test_stage, should_skip, skip_env_var


def test_runs_when_not_skipped():
    assert run_test_stage("setup", lambda: "done", environ={}) == "done"


def test_skipped_when_env_set():
    calls = []
    assert run_test_stage("setup", lambda: calls.append(1), environ={"SKIP_setup": "true"}) is None
    assert calls == []


def test_only_named_stage_skipped():
    assert should_skip("setup", {"SKIP_setup": "1"})
    assert not should_skip("validate", {"SKIP_setup": "1"})
    assert not should_skip("setup", {"SKIP_setup": ""})


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv(skip_env_var("validate"), "1")
    assert should_skip("validate")


def test_any_stage_skipped():
    assert any_stage_skipped({"SKIP_teardown": "1", "HOME": "/root"})
    assert not any_stage_skipped({"SKIP_teardown": "", "HOME": "/root"})
    assert not any_stage_skipped({})
