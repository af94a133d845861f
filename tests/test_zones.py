"""Tests for zone grouping and the shutdown menu."""

from conftest import make_vm
from vmfleet.zones import (
    MENU_ALL,
    MENU_NON_ZONAL,
    MENU_NONE,
    MENU_SPECIFIC,
    MENU_ZONE,
    build_zone_menu,
    find_vms_by_name,
    group_by_zone,
)


class TestGroupByZone:
    """Tests for group_by_zone."""

    def test_multi_zone_vm_in_each_zone(self):
        """Test a VM in zones 1 and 2 is listed under both."""
        multi = make_vm("vm-multi", zones=["1", "2"])
        single = make_vm("vm-single", zones=["2"])
        flat = make_vm("vm-flat")

        groups = group_by_zone([multi, single, flat])

        assert [vm.name for vm in groups.zonal["1"]] == ["vm-multi"]
        assert [vm.name for vm in groups.zonal["2"]] == ["vm-multi", "vm-single"]
        assert [vm.name for vm in groups.non_zonal] == ["vm-flat"]

    def test_numeric_zone_order(self):
        """Test zones sort numerically."""
        vms = [make_vm("a", zones=["10"]), make_vm("b", zones=["2"]), make_vm("c", zones=["1"])]
        assert list(group_by_zone(vms).zonal) == ["1", "2", "10"]


class TestBuildZoneMenu:
    """Tests for build_zone_menu."""

    def test_menu_layout(self):
        """Test zones come first, then the fixed entries."""
        multi = make_vm("vm-multi", zones=["1", "2"])
        flat = make_vm("vm-flat")

        menu = build_zone_menu([multi, flat])

        assert [entry.label for entry in menu] == [
            "Zone 1", "Zone 2", "Non-zonal VMs", "All VMs", "Specific VM", "None (exit)",
        ]
        assert [entry.kind for entry in menu] == [
            MENU_ZONE, MENU_ZONE, MENU_NON_ZONAL, MENU_ALL, MENU_SPECIFIC, MENU_NONE,
        ]

    def test_multi_zone_vm_once_in_all(self):
        """Test a multi-zone VM is listed only once under All VMs."""
        multi = make_vm("vm-multi", zones=["1", "2"])
        menu = build_zone_menu([multi])

        all_entry = next(entry for entry in menu if entry.kind == MENU_ALL)
        assert [vm.name for vm in all_entry.vms] == ["vm-multi"]

    def test_no_zonal_vms(self):
        """Test a zoneless fleet still offers the fixed entries."""
        menu = build_zone_menu([make_vm("vm-flat")])
        assert menu[0].kind == MENU_NON_ZONAL
        assert len(menu) == 4


class TestFindVmsByName:
    """Tests for find_vms_by_name."""

    def test_case_insensitive_exact_match(self):
        """Test names match exactly, ignoring case."""
        vms = [make_vm("web-01"), make_vm("web-011")]
        assert [vm.name for vm in find_vms_by_name(vms, "WEB-01")] == ["web-01"]

    def test_same_name_in_two_groups(self):
        """Test duplicates across resource groups are all returned."""
        vms = [make_vm("web", "rg-a"), make_vm("web", "rg-b")]
        assert [vm.resource_group for vm in find_vms_by_name(vms, "web")] == ["rg-a", "rg-b"]

    def test_blank_matches_nothing(self):
        """Test an empty name never matches."""
        assert find_vms_by_name([make_vm("web")], "  ") == []
