"""Data models for fleet operations."""

import json
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field, RootModel


class SubscriptionInfo(BaseModel):
    """Information about an Azure subscription."""
    subscription_id: str = Field(description="Subscription ID")
    display_name: str = Field(description="Subscription display name")
    state: str = Field(default="Unknown", description="Subscription state (Enabled, Disabled, etc.)")
    tenant_id: str = Field(default="", description="Tenant ID")


class VmInfo(BaseModel):
    """Read-only snapshot of a virtual machine, fetched once per run."""
    resource_id: str = Field(description="Full resource ID")
    name: str = Field(description="VM name")
    resource_group: str = Field(description="Resource group name")
    location: str = Field(default="", description="Azure region")
    zones: List[str] = Field(default_factory=list, description="Availability zones (empty if non-zonal)")

    @property
    def is_zonal(self) -> bool:
        return bool(self.zones)


class TagMap(RootModel[Dict[str, str]]):
    """Ordered tag mapping.

    Equality is mapping equality. Key membership is case-insensitive, as
    Azure tag names are. JSON output preserves insertion order.
    """

    root: Dict[str, str] = Field(default_factory=dict)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        lowered = key.lower()
        return any(existing.lower() == lowered for existing in self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, key: str) -> str:
        return self.root[key]

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self.root.items())

    def as_dict(self) -> Dict[str, str]:
        """Return a plain dict copy."""
        return dict(self.root)

    def merged(self, key: str, value: str) -> "TagMap":
        """Return a new map with key set to value, other tags untouched."""
        tags = dict(self.root)
        tags[key] = value
        return TagMap(tags)

    def to_json(self) -> str:
        return json.dumps(self.root, ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_json(cls, text: Optional[str]) -> "TagMap":
        """Parse a JSON object; blank text is an empty map."""
        if not text or not text.strip():
            return cls({})
        data = json.loads(text)
        if data is None:
            return cls({})
        return cls({str(k): str(v) for k, v in data.items()})

    @classmethod
    def from_azure(cls, tags: Optional[Dict[str, str]]) -> "TagMap":
        return cls(dict(tags or {}))


class TagChange(BaseModel):
    """Before/after snapshot of one successful tag merge."""
    resource_id: str
    name: str
    resource_group: str
    old_tags: TagMap = Field(default_factory=TagMap)
    new_tags: TagMap = Field(default_factory=TagMap)


class ShutdownAction(str, Enum):
    """How a VM is shut down."""
    STOP = "stop"
    DEALLOCATE = "deallocate"


class ShutdownRecord(BaseModel):
    """One VM's shutdown attempt."""
    resource_id: str
    name: str
    resource_group: str
    action: Optional[ShutdownAction] = Field(default=None, description="None if the probe failed")
    ephemeral_option: Optional[str] = Field(default=None, description="OS disk diff-disk option, e.g. 'Local'")
    error: str = Field(default="", description="Error message if the shutdown call failed")

    @property
    def succeeded(self) -> bool:
        return self.action is not None and not self.error

    @classmethod
    def for_vm(cls, vm: VmInfo) -> "ShutdownRecord":
        return cls(resource_id=vm.resource_id, name=vm.name, resource_group=vm.resource_group)


class ShutdownResult(BaseModel):
    """Outcome of a shutdown pass over the target set."""
    records: List[ShutdownRecord] = Field(default_factory=list)
    stopped: List[ShutdownRecord] = Field(default_factory=list, description="Stop issued (ephemeral OS disk)")
    failed: List[ShutdownRecord] = Field(default_factory=list)
