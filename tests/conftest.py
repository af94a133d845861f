"""Pytest fixtures for vmfleet tests."""

import pytest
from unittest.mock import MagicMock

from vmfleet.azure.auth import AzureSession
from vmfleet.azure.models import VmInfo

SUBSCRIPTION_ID = "12345678-1234-1234-1234-123456789abc"


def make_vm(name, resource_group="rg-app", zones=None, location="westeurope"):
    """Build a VmInfo with a realistic resource ID."""
    return VmInfo(
        resource_id=(
            f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{resource_group}"
            f"/providers/Microsoft.Compute/virtualMachines/{name}"
        ),
        name=name,
        resource_group=resource_group,
        location=location,
        zones=list(zones or []),
    )


def _operation(parameters):
    operation = parameters.operation
    return str(getattr(operation, "value", operation))


class FakeAzure:
    """In-memory stand-in for the compute and resource SDK clients.

    Tags live in ``self.tags`` keyed by resource ID; VMs in ``self.vms``.
    ``self.ephemeral`` maps VM name to its diff-disk option and
    ``self.power_states`` maps VM name to a list of states returned by
    successive instance_view calls (the last one repeats).
    """

    def __init__(self):
        self.vms = []
        self.tags = {}
        self.ephemeral = {}
        self.power_states = {}
        self.fail_on = {}

        self.compute = MagicMock()
        self.resources = MagicMock()

        vm_ops = self.compute.virtual_machines
        vm_ops.list_all.side_effect = self._list_all
        vm_ops.get.side_effect = self._get_vm
        vm_ops.instance_view.side_effect = self._instance_view
        vm_ops.begin_power_off.side_effect = lambda rg, name: self._check("power_off", name)
        vm_ops.begin_deallocate.side_effect = lambda rg, name: self._check("deallocate", name)
        vm_ops.begin_start.side_effect = lambda rg, name: self._check("start", name)

        tag_ops = self.resources.tags
        tag_ops.get_at_scope.side_effect = self._get_tags
        tag_ops.begin_update_at_scope.side_effect = self._update_tags
        tag_ops.begin_delete_at_scope.side_effect = self._delete_tags

    def add_vm(self, vm, tags=None, ephemeral=None, power_states=None):
        self.vms.append(vm)
        self.tags[vm.resource_id] = dict(tags or {})
        self.ephemeral[vm.name] = ephemeral
        self.power_states[vm.name] = list(power_states or ["running"])
        return vm

    def session(self):
        return AzureSession(
            credential=MagicMock(),
            subscription_id=SUBSCRIPTION_ID,
            subscription_name="Production",
            _compute=self.compute,
            _resources=self.resources,
        )

    def _check(self, operation, name):
        if name in self.fail_on.get(operation, ()):
            raise Exception(f"Operation {operation} failed for {name}")
        return MagicMock()

    def _list_all(self):
        self._check("list", "*")
        result = []
        for vm in self.vms:
            sdk_vm = MagicMock()
            sdk_vm.id = vm.resource_id
            sdk_vm.name = vm.name
            sdk_vm.location = vm.location
            sdk_vm.zones = list(vm.zones) or None
            result.append(sdk_vm)
        return iter(result)

    def _get_vm(self, resource_group, name):
        self._check("get", name)
        sdk_vm = MagicMock()
        option = self.ephemeral.get(name)
        if option is None:
            sdk_vm.storage_profile.os_disk.diff_disk_settings = None
        else:
            sdk_vm.storage_profile.os_disk.diff_disk_settings.option = option
        return sdk_vm

    def _instance_view(self, resource_group, name):
        self._check("instance_view", name)
        states = self.power_states[name]
        state = states.pop(0) if len(states) > 1 else states[0]
        view = MagicMock()
        provisioning = MagicMock(code="ProvisioningState/succeeded")
        power = MagicMock(code=f"PowerState/{state}")
        view.statuses = [provisioning, power]
        return view

    def _name_of(self, resource_id):
        return resource_id.rsplit("/", 1)[-1]

    def _get_tags(self, resource_id):
        self._check("get_tags", self._name_of(resource_id))
        result = MagicMock()
        result.properties.tags = dict(self.tags.get(resource_id, {})) or None
        return result

    def _update_tags(self, resource_id, parameters):
        operation = _operation(parameters)
        self._check(operation.lower(), self._name_of(resource_id))
        new_tags = dict(parameters.properties.tags)
        if operation == "Merge":
            merged = dict(self.tags.get(resource_id, {}))
            merged.update(new_tags)
            self.tags[resource_id] = merged
        else:
            self.tags[resource_id] = new_tags
        return MagicMock()

    def _delete_tags(self, resource_id):
        self._check("delete", self._name_of(resource_id))
        self.tags[resource_id] = {}
        return MagicMock()


class ScriptedInput:
    """Input function returning queued answers; raises EOFError when exhausted."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt_text):
        self.prompts.append(prompt_text)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch, tmp_path):
    """Isolate settings from the developer's environment."""
    from vmfleet.config import reload_settings

    for name in (
        "AZURE_TENANT_ID",
        "AZURE_CLIENT_ID",
        "AZURE_CLIENT_SECRET",
        "AZURE_SUBSCRIPTION_ID",
        "FLEET_OUTPUT_DIR",
        "FLEET_LOG_LEVEL",
        "FLEET_POLL_TIMEOUT",
        "FLEET_POLL_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reload_settings()
    yield


@pytest.fixture
def fake_azure():
    """Empty in-memory Azure backend."""
    return FakeAzure()


@pytest.fixture
def run_log(tmp_path):
    """Run log writing to a temp file, without console echo."""
    from vmfleet.logging_config import RunLog

    log = RunLog(tmp_path / "run.log")
    yield log
    log.close()


@pytest.fixture
def settings(tmp_path):
    """Settings with a temp output directory and fast polling."""
    from vmfleet.config import Settings

    output_dir = tmp_path / "out"
    output_dir.mkdir()
    return Settings(fleet_output_dir=str(output_dir), fleet_poll_timeout=30, fleet_poll_interval=1)
