"""Tests for scenario teardown ordering and failure handling."""

import pytest

from tf_module_tests.logging import MemoryLogger
from tf_module_tests.runtime.options import ModuleOptions, copy_terraform_folder_to_temp, load_options, save_options
from tf_module_tests.runtime.scenario import Scenario
from tf_module_tests.runtime.stages import run_test_stage, should_skip
from tf_module_tests.runtime.terraform import TerraformCommandError


class FakeRuntime:
    """Records init/apply/destroy calls into a shared journal."""

    def __init__(self, options, journal, fail_apply=False, fail_destroy=False):
        self.options = options
        self.journal = journal
        self.fail_apply = fail_apply
        self.fail_destroy = fail_destroy

    @property
    def name(self):
        return self.options.terraform_dir

    def init_and_apply(self):
        self.journal.append(("apply", self.name))
        if self.fail_apply:
            raise TerraformCommandError(["terraform", "apply"], 1, stderr="apply failed")

    def destroy(self):
        self.journal.append(("destroy", self.name))
        if self.fail_destroy:
            raise TerraformCommandError(["terraform", "destroy"], 1, stderr="destroy failed")


@pytest.fixture
def journal():
    return []


def _factory(journal, fail_apply=(), fail_destroy=()):
    def factory(options):
        return FakeRuntime(
            options, journal,
            fail_apply=options.terraform_dir in fail_apply,
            fail_destroy=options.terraform_dir in fail_destroy,
        )
    return factory


def _scenario(settings, factory, events=None):
    return Scenario("chain", settings=settings, event_logger=events, runtime_factory=factory)


def test_destroys_in_reverse_order(settings, journal):
    with _scenario(settings, _factory(journal)) as scenario:
        for name in ("vpc", "alb", "compute"):
            scenario.deploy(ModuleOptions(name), name=name)

    assert journal == [
        ("apply", "vpc"), ("apply", "alb"), ("apply", "compute"),
        ("destroy", "compute"), ("destroy", "alb"), ("destroy", "vpc"),
    ]
    assert scenario.applied == ["vpc", "alb", "compute"]
    assert scenario.destroyed == ["compute", "alb", "vpc"]


def test_failed_assertion_still_destroys(settings, journal):
    with pytest.raises(AssertionError, match="NAT gateways"):
        with _scenario(settings, _factory(journal)) as scenario:
            scenario.deploy(ModuleOptions("vpc"), name="vpc")
            raise AssertionError("NAT gateways: expected 3, got 1")

    assert journal[-1] == ("destroy", "vpc")


def test_failed_apply_destroys_partial_module_and_earlier_ones(settings, journal):
    with pytest.raises(TerraformCommandError, match="apply failed"):
        with _scenario(settings, _factory(journal, fail_apply={"alb"})) as scenario:
            scenario.deploy(ModuleOptions("vpc"), name="vpc")
            scenario.deploy(ModuleOptions("alb"), name="alb")
            scenario.deploy(ModuleOptions("compute"), name="compute")

    assert ("apply", "compute") not in journal
    assert [entry for entry in journal if entry[0] == "destroy"] == [("destroy", "alb"), ("destroy", "vpc")]
    assert scenario.applied == ["vpc"]


def test_failed_destroy_does_not_stop_the_rest(settings, journal):
    events = MemoryLogger()
    with pytest.raises(TerraformCommandError, match="destroy failed"):
        with _scenario(settings, _factory(journal, fail_destroy={"alb"}), events) as scenario:
            for name in ("vpc", "alb", "compute"):
                scenario.deploy(ModuleOptions(name), name=name)

    assert [entry for entry in journal if entry[0] == "destroy"] == [
        ("destroy", "compute"), ("destroy", "alb"), ("destroy", "vpc"),
    ]
    assert scenario.destroyed == ["compute", "vpc"]
    assert "cleanup.failed" in events.names()


def test_destroy_error_does_not_mask_test_failure(settings, journal):
    with pytest.raises(AssertionError, match="ALB type"):
        with _scenario(settings, _factory(journal, fail_destroy={"vpc"})) as scenario:
            scenario.deploy(ModuleOptions("vpc"), name="vpc")
            raise AssertionError("ALB type: expected 'application'")


def test_label_defaults_to_directory_name(settings, journal):
    with _scenario(settings, _factory(journal)) as scenario:
        scenario.deploy(ModuleOptions("/tmp/copy/modules/alb"))
    assert scenario.applied == ["alb"]


def test_events(settings, journal):
    events = MemoryLogger()
    with _scenario(settings, _factory(journal), events) as scenario:
        scenario.deploy(ModuleOptions("vpc"), name="vpc")

    assert events.names() == ["scenario.started", "cleanup.completed", "scenario.completed"]
    assert events.events[-1]["data"]["passed"] is True


def test_keyboard_interrupt_still_destroys_in_reverse(settings, journal):
    with pytest.raises(KeyboardInterrupt):
        with _scenario(settings, _factory(journal)) as scenario:
            for name in ("vpc", "alb", "compute"):
                scenario.deploy(ModuleOptions(name), name=name)
            raise KeyboardInterrupt

    assert [entry for entry in journal if entry[0] == "destroy"] == [
        ("destroy", "compute"), ("destroy", "alb"), ("destroy", "vpc"),
    ]
    assert scenario.destroyed == ["compute", "alb", "vpc"]


class TestStagesAcrossInvocations:
    """Setup in one invocation, validate and teardown in the next."""

    def _run(self, settings, journal, module_root, environ):
        working_dir = copy_terraform_folder_to_temp(module_root, "modules/compute", environ=environ)
        seen = {}

        with Scenario(
            "compute", settings=settings, runtime_factory=_factory(journal),
            teardown_stage="teardown", environ=environ,
        ) as scenario:

            def setup():
                for name in ("vpc", "alb", "compute"):
                    scenario.deploy(ModuleOptions(name, vars={"instance_count": 2}), name=name)
                save_options(working_dir, ModuleOptions("compute", vars={"instance_count": 2}))
                scenario.save(working_dir)

            def validate():
                seen["options"] = load_options(working_dir)

            run_test_stage("setup", setup, environ=environ)
            if should_skip("setup", environ) and not should_skip("teardown", environ):
                seen["restored"] = scenario.restore(working_dir)
            run_test_stage("validate", validate, environ=environ)

        return working_dir, seen

    def test_setup_then_validate(self, settings, journal, module_root):
        first_dir, first = self._run(settings, journal, module_root, {"SKIP_validate": "1", "SKIP_teardown": "1"})

        assert first_dir == module_root / "modules" / "compute"
        assert first == {}
        assert journal == [("apply", "vpc"), ("apply", "alb"), ("apply", "compute")]

        second_dir, second = self._run(settings, journal, module_root, {"SKIP_setup": "1"})

        assert second_dir == first_dir
        assert second["options"].vars == {"instance_count": 2}
        assert list(second["restored"]) == ["vpc", "alb", "compute"]
        assert journal[3:] == [("destroy", "compute"), ("destroy", "alb"), ("destroy", "vpc")]

    def test_skipped_teardown_leaves_modules_up(self, settings, journal):
        with Scenario(
            "vpc", settings=settings, runtime_factory=_factory(journal),
            teardown_stage="teardown", environ={"SKIP_teardown": "1"},
        ) as scenario:
            scenario.deploy(ModuleOptions("vpc"), name="vpc")

        assert journal == [("apply", "vpc")]
        assert scenario.destroyed == []
