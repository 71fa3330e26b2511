"""Deploy VPC, ALB and compute in a setup stage, then validate from saved options.

Stages can be split across invocations, e.g. ``SKIP_validate=1 SKIP_teardown=1``
to deploy, then ``SKIP_setup=1`` to validate and destroy what is already up.
"""

import pytest

from tf_module_tests.naming import project_name
from tf_module_tests.runtime import (
    Scenario,
    TerraformRuntime,
    copy_terraform_folder_to_temp,
    load_options,
    run_test_stage,
    save_options,
)
from tf_module_tests.runtime.stages import should_skip
from tf_module_tests.scenarios import deploy_alb, deploy_compute, deploy_vpc
from tf_module_tests.validation import ComputeValidator

pytestmark = pytest.mark.integration


@pytest.mark.parametrize("region,environment", [
    pytest.param("us-east-1", "ci", id="us-east-1-ci"),
])
def test_compute_module(region, environment, integration_settings, require_module, events, clients_for):
    for relative in ("modules/vpc", "modules/alb", "modules/compute"):
        require_module(relative)

    working_dir = copy_terraform_folder_to_temp(integration_settings.root_dir, "modules/compute")
    project = project_name("comp")

    with Scenario(
        f"compute-{region}-{environment}",
        settings=integration_settings,
        event_logger=events,
        teardown_stage="teardown",
    ) as scenario:

        def setup():
            vpc = deploy_vpc(scenario, region, environment, project)
            alb = deploy_alb(scenario, vpc)
            compute = deploy_compute(scenario, vpc, alb, terraform_dir=str(working_dir))
            save_options(working_dir, compute.options)
            scenario.save(working_dir)

        def validate():
            options = load_options(working_dir)
            runtime = TerraformRuntime(options, timeout=integration_settings.command_timeout, event_logger=events)
            validator = ComputeValidator.from_outputs(clients_for(region), runtime, options, events)
            validator.check_launch_template()
            validator.check_autoscaling_group()
            validator.check_iam_role()
            validator.check_security_group()

        run_test_stage("setup", setup)
        if should_skip("setup") and not should_skip("teardown"):
            scenario.restore(working_dir)
        run_test_stage("validate", validate)
