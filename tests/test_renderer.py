"""Tests for the UI renderer."""

import io
import unittest

from rich.console import Console

from conftest import make_vm
from vmfleet.azure.models import ShutdownAction, ShutdownRecord, ShutdownResult
from vmfleet.ui.renderer import Renderer
from vmfleet.zones import build_zone_menu



def _renderer(*answers):
    answers = list(answers)

    def input_func(prompt_text):
        if not answers:
            raise EOFError
        return answers.pop(0)

    return Renderer(console=Console(file=io.StringIO(), width=200), input_func=input_func)


class TestConfirm(unittest.TestCase):
    """Test yes/no confirmation."""

    def test_yes(self):
        self.assertTrue(_renderer("y").confirm("Go?"))
        self.assertTrue(_renderer(" YES ").confirm("Go?"))

    def test_default(self):
        self.assertFalse(_renderer("").confirm("Go?"))
        self.assertTrue(_renderer("").confirm("Go?", default=True))

    def test_other_answer_is_no(self):
        self.assertFalse(_renderer("maybe").confirm("Go?", default=True))

    def test_eof_is_no(self):
        self.assertFalse(_renderer().confirm("Go?", default=True))


class TestGetInput(unittest.TestCase):
    """Test line input."""

    def test_strips(self):
        self.assertEqual(_renderer("  0-2 ").get_input("> "), "0-2")

    def test_eof_propagates(self):
        with self.assertRaises(EOFError):
            _renderer().get_input("> ")


class TestDisplay(unittest.TestCase):
    """Test display methods render their content."""

    def test_menu_numbered_from_one(self):
        renderer = _renderer()
        renderer.show_menu(build_zone_menu([]))
        text = renderer.console.file.getvalue()

        self.assertIn("1. Non-zonal VMs", text)
        self.assertIn("4. None (exit)", text)

    def test_shutdown_summary(self):
        renderer = _renderer()
        ok = ShutdownRecord(resource_id="/a", name="vm-a", resource_group="rg", action=ShutdownAction.STOP,
                            ephemeral_option="Local")
        bad = ShutdownRecord(resource_id="/b", name="vm-b", resource_group="rg", error="boom")
        renderer.show_shutdown_summary(ShutdownResult(records=[ok, bad], stopped=[ok], failed=[bad]))
        text = renderer.console.file.getvalue()

        self.assertIn("SHUTDOWN SUMMARY", text)
        self.assertIn("stop", text)
        self.assertIn("boom", text)

    def test_header_simulate_banner(self):
        renderer = _renderer()
        renderer.header("ZONE SHUTDOWN", subscription="Production", dry_run=True)
        text = renderer.console.file.getvalue()

        self.assertIn("ZONE SHUTDOWN", text)
        self.assertIn("SIMULATE", text)

    def test_shutdown_summary_status_icons(self):
        """Test each row's icon follows whether that VM's shutdown succeeded."""
        renderer = _renderer()
        ok = ShutdownRecord(resource_id="/a", name="vm-a", resource_group="rg", action=ShutdownAction.DEALLOCATE)
        unreadable = ShutdownRecord(resource_id="/b", name="vm-b", resource_group="rg", error="no access")
        renderer.show_shutdown_summary(ShutdownResult(records=[ok, unreadable], failed=[unreadable]))
        lines = renderer.console.file.getvalue().splitlines()

        self.assertIn("✓", next(line for line in lines if "vm-a" in line))
        self.assertIn("✗", next(line for line in lines if "vm-b" in line))

    def test_menu_counts_only_on_vm_groups(self):
        """Test VM counts appear on group entries and not on Specific VM or None."""
        renderer = _renderer()
        renderer.show_menu(build_zone_menu([make_vm("vm-1", zones=["1"]), make_vm("vm-2")]))
        lines = renderer.console.file.getvalue().splitlines()

        self.assertIn("(1 VMs)", next(line for line in lines if "Zone 1" in line))
        self.assertIn("(1 VMs)", next(line for line in lines if "Non-zonal" in line))
        self.assertIn("(2 VMs)", next(line for line in lines if "All VMs" in line))
        self.assertNotIn("VMs)", next(line for line in lines if "None (exit)" in line))

    def test_header_subscription_with_brackets(self):
        """Test a subscription name containing markup characters prints verbatim."""
        renderer = _renderer()
        renderer.header("ZONE SHUTDOWN", subscription="Prod [legacy] [/bold]")

        self.assertIn("Prod [legacy] [/bold]", renderer.console.file.getvalue())


if __name__ == "__main__":
    unittest.main()
