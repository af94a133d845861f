"""Rendering of the generated undo and restart scripts.

Each script is a fixed template filled from captured records, so the output
can be compared against golden text independently of the Azure calls that
produced the records. Both scripts are standalone Python programs that need
only azure-identity and the azure-mgmt SDKs.
"""

import os
import stat
from datetime import datetime
from pathlib import Path
from string import Template
from typing import Optional, Sequence, Union

from .azure.models import TagChange, VmInfo

GENERATED_AT_FORMAT = "%Y-%m-%d %H:%M:%S"


_CREDENTIAL_BLOCK = '''\
def get_credential():
    """Service principal from the environment if set, else DefaultAzureCredential."""
    tenant_id = os.environ.get("AZURE_TENANT_ID")
    client_id = os.environ.get("AZURE_CLIENT_ID")
    client_secret = os.environ.get("AZURE_CLIENT_SECRET")
    if tenant_id and client_id and client_secret:
        return ClientSecretCredential(tenant_id=tenant_id, client_id=client_id, client_secret=client_secret)
    return DefaultAzureCredential()
'''


UNDO_TEMPLATE = Template('''\
#!/usr/bin/env python3
"""Revert tags applied by vmfleet tag.

Generated: $generated_at
Source CSV: $csv_name
Records: $record_count

Each row's OldTags column replaces the resource's full tag set.
Run with --dry-run to print the replacements without applying them.
"""

import argparse
import csv
import json
import os
import sys
from pathlib import Path

from azure.identity import ClientSecretCredential, DefaultAzureCredential
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.resource.resources.models import Tags, TagsPatchResource

CSV_FILE = $csv_literal
SUBSCRIPTION_ID = $subscription_literal


$credential_block

def main():
    parser = argparse.ArgumentParser(description="Revert tags recorded in " + CSV_FILE)
    parser.add_argument("--dry-run", "--whatif", action="store_true", help="Print replacements only")
    args = parser.parse_args()

    csv_path = Path(__file__).resolve().parent / CSV_FILE
    with open(csv_path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))

    client = None
    if not args.dry_run:
        subscription_id = SUBSCRIPTION_ID or os.environ.get("AZURE_SUBSCRIPTION_ID")
        client = ResourceManagementClient(get_credential(), subscription_id)

    failures = 0
    for row in rows:
        old_tags = json.loads(row["OldTags"] or "{}")
        if args.dry_run:
            print(f"Would replace tags on {row['VMName']} with {json.dumps(old_tags)}")
            continue
        try:
            if old_tags:
                parameters = TagsPatchResource(operation="Replace", properties=Tags(tags=old_tags))
                client.tags.begin_update_at_scope(row["ResourceId"], parameters).result()
            else:
                client.tags.begin_delete_at_scope(row["ResourceId"]).result()
            print(f"Reverted tags on {row['VMName']}")
        except Exception as e:
            failures += 1
            print(f"Failed to revert tags on {row['VMName']}: {e}", file=sys.stderr)

    print(f"Done: {len(rows) - failures} reverted, {failures} failed")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
''')


RESTART_TEMPLATE = Template('''\
#!/usr/bin/env python3
"""Restart VMs shut down by vmfleet zone-shutdown.

Generated: $generated_at
Selection: $selection
VMs: $vm_count

Starts every VM in the confirmed target set, whether it was stopped or
deallocated. Run with --dry-run to print the start commands only.
"""

import argparse
import os
import sys

from azure.identity import ClientSecretCredential, DefaultAzureCredential
from azure.mgmt.compute import ComputeManagementClient

SUBSCRIPTION_ID = $subscription_literal

failures = []


$credential_block

def start_vm(compute, resource_group, name):
    if compute is None:
        print(f"Would run: az vm start --resource-group {resource_group} --name {name} --no-wait")
        return
    try:
        compute.virtual_machines.begin_start(resource_group, name)
        print(f"Start requested for {name}")
    except Exception as e:
        failures.append(name)
        print(f"Failed to start {name}: {e}", file=sys.stderr)


def main():
    parser = argparse.ArgumentParser(description="Restart VMs from a zone shutdown")
    parser.add_argument("--dry-run", "--whatif", action="store_true", help="Print start commands only")
    args = parser.parse_args()

    compute = None
    if not args.dry_run:
        subscription_id = SUBSCRIPTION_ID or os.environ.get("AZURE_SUBSCRIPTION_ID")
        compute = ComputeManagementClient(get_credential(), subscription_id)

$start_lines

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
''')


def _literal(value: Optional[str]) -> str:
    return repr(value or "")


def render_undo_script(
    changes: Sequence[TagChange],
    csv_name: str,
    generated_at: datetime,
    subscription_id: Optional[str] = None,
) -> str:
    """Render the undo script for a tagging run.

    Args:
        changes: TagChange records written to the CSV
        csv_name: File name of the CSV, resolved next to the script
        generated_at: Generation timestamp for the header
        subscription_id: Subscription the tags were applied in
    """
    return UNDO_TEMPLATE.substitute(
        generated_at=generated_at.strftime(GENERATED_AT_FORMAT),
        csv_name=csv_name,
        record_count=len(changes),
        csv_literal=repr(csv_name),
        subscription_literal=_literal(subscription_id),
        credential_block=_CREDENTIAL_BLOCK,
    )


def render_restart_script(
    targets: Sequence[VmInfo],
    generated_at: datetime,
    selection: str = "",
    subscription_id: Optional[str] = None,
) -> str:
    """Render the restart script: one start call per target VM.

    Args:
        targets: The confirmed target set, in order
        generated_at: Generation timestamp for the header
        selection: Menu label the operator picked
        subscription_id: Subscription the VMs live in
    """
    start_lines = "\n".join(
        f"    start_vm(compute, {vm.resource_group!r}, {vm.name!r})" for vm in targets
    )
    return RESTART_TEMPLATE.substitute(
        generated_at=generated_at.strftime(GENERATED_AT_FORMAT),
        selection=selection,
        vm_count=len(targets),
        subscription_literal=_literal(subscription_id),
        credential_block=_CREDENTIAL_BLOCK,
        start_lines=start_lines or "    pass",
    )


def write_script(path: Union[str, Path], content: str) -> Path:
    """Write a generated script and mark it executable."""
    path = Path(path)
    path.write_text(content, encoding="utf-8")
    mode = os.stat(path).st_mode
    os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path
