"""Tag mutation engine and its CSV undo log.

The forward operation is an additive merge of one key. The undo operation
is a full replace with the tag map captured before the merge, which is the
complete desired end state, so reverting never loses tags applied since.
"""

import csv
import logging
from pathlib import Path
from typing import List, Sequence, Union

from .azure.auth import AzureError
from .azure.fleet import FleetClient
from .azure.models import TagChange, TagMap, VmInfo
from .logging_config import RunLog

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["ResourceGroup", "VMName", "ResourceId", "OldTags", "NewTags"]


def apply_tag(
    client: FleetClient,
    vms: Sequence[VmInfo],
    key: str,
    value: str,
    run_log: RunLog,
) -> List[TagChange]:
    """Merge ``key=value`` into each VM's tags.

    VMs that already carry the key are skipped without a mutating call.
    A failure on one VM is logged and the batch continues.

    Returns:
        One TagChange per successfully tagged VM, in selection order
    """
    changes: List[TagChange] = []

    for vm in vms:
        try:
            old_tags = client.get_resource_tags(vm.resource_id)
        except AzureError as e:
            run_log.error(f"Failed to read tags for {vm.name}: {e.message}", command=e.details.get("command"))
            continue

        if key in old_tags:
            run_log.info(f"Skipping {vm.name}: tag '{key}' already present")
            continue

        try:
            client.merge_tag(vm.resource_id, key, value)
            if client.dry_run:
                new_tags = old_tags.merged(key, value)
            else:
                new_tags = client.get_resource_tags(vm.resource_id)
        except AzureError as e:
            run_log.error(f"Failed to tag {vm.name}: {e.message}", command=e.details.get("command"))
            continue

        changes.append(TagChange(
            resource_id=vm.resource_id,
            name=vm.name,
            resource_group=vm.resource_group,
            old_tags=old_tags,
            new_tags=new_tags,
        ))
        run_log.info(f"Tagged {vm.name} with {key}={value}")

    logger.info(f"Tagged {len(changes)} of {len(vms)} VMs")
    return changes


def revert_tag_changes(client: FleetClient, changes: Sequence[TagChange], run_log: RunLog) -> int:
    """Replace each resource's tags with its recorded old tags.

    Returns:
        Number of records that failed to revert
    """
    failures = 0
    for change in changes:
        try:
            client.replace_tags(change.resource_id, change.old_tags)
        except AzureError as e:
            failures += 1
            run_log.error(f"Failed to revert tags on {change.name}: {e.message}", command=e.details.get("command"))
            continue
        run_log.info(f"Reverted tags on {change.name}")
    return failures


def write_tag_changes_csv(changes: Sequence[TagChange], path: Union[str, Path]) -> Path:
    """Write the undo log CSV: one row per TagChange, tag maps as JSON."""
    path = Path(path)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for change in changes:
            writer.writerow({
                "ResourceGroup": change.resource_group,
                "VMName": change.name,
                "ResourceId": change.resource_id,
                "OldTags": change.old_tags.to_json(),
                "NewTags": change.new_tags.to_json(),
            })
    return path


def read_tag_changes_csv(path: Union[str, Path]) -> List[TagChange]:
    """Read an undo log CSV back into TagChange records."""
    with open(path, newline="", encoding="utf-8") as f:
        return [
            TagChange(
                resource_id=row["ResourceId"],
                name=row["VMName"],
                resource_group=row["ResourceGroup"],
                old_tags=TagMap.from_json(row.get("OldTags")),
                new_tags=TagMap.from_json(row.get("NewTags")),
            )
            for row in csv.DictReader(f)
        ]
