"""vmfleet - operator workflows for Azure VM fleets.

Bulk tagging with an undo log, and zone-based DR shutdown with a
generated restart script.
"""

__version__ = "0.1.0"
