"""Zone grouping and the shutdown target menu."""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from .azure.models import VmInfo

MENU_ZONE = "zone"
MENU_NON_ZONAL = "non_zonal"
MENU_ALL = "all"
MENU_SPECIFIC = "specific"
MENU_NONE = "none"


@dataclass
class ZoneGroups:
    """VMs partitioned by availability zone.

    A VM in several zones is listed under each of them.
    """

    zonal: Dict[str, List[VmInfo]] = field(default_factory=dict)
    non_zonal: List[VmInfo] = field(default_factory=list)


@dataclass
class MenuEntry:
    """One choice of the zone menu."""

    label: str
    kind: str
    vms: List[VmInfo] = field(default_factory=list)
    zone: str = ""


def zone_sort_key(zone: str):
    """Numeric zone labels sort numerically, before any non-numeric ones."""
    return (0, int(zone), "") if zone.isdigit() else (1, 0, zone)


def group_by_zone(vms: Sequence[VmInfo]) -> ZoneGroups:
    """Partition VMs into per-zone groups and a non-zonal group."""
    zonal: Dict[str, List[VmInfo]] = {}
    non_zonal: List[VmInfo] = []

    for vm in vms:
        if not vm.is_zonal:
            non_zonal.append(vm)
            continue
        for zone in dict.fromkeys(vm.zones):
            zonal.setdefault(zone, []).append(vm)

    ordered = {zone: zonal[zone] for zone in sorted(zonal, key=zone_sort_key)}
    return ZoneGroups(zonal=ordered, non_zonal=non_zonal)


def build_zone_menu(vms: Sequence[VmInfo]) -> List[MenuEntry]:
    """Build the fixed menu: each zone, non-zonal, all, specific, none."""
    groups = group_by_zone(vms)

    menu = [
        MenuEntry(label=f"Zone {zone}", kind=MENU_ZONE, vms=list(members), zone=zone)
        for zone, members in groups.zonal.items()
    ]
    menu.append(MenuEntry(label="Non-zonal VMs", kind=MENU_NON_ZONAL, vms=list(groups.non_zonal)))
    menu.append(MenuEntry(label="All VMs", kind=MENU_ALL, vms=list(vms)))
    menu.append(MenuEntry(label="Specific VM", kind=MENU_SPECIFIC))
    menu.append(MenuEntry(label="None (exit)", kind=MENU_NONE))
    return menu


def find_vms_by_name(vms: Sequence[VmInfo], name: str) -> List[VmInfo]:
    """Exact, case-insensitive name match across the whole inventory.

    VM names are only unique per resource group, so several may match.
    """
    wanted = (name or "").strip().lower()
    if not wanted:
        return []
    return [vm for vm in vms if vm.name.lower() == wanted]
