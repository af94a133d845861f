"""Azure collaborators: authentication, session, models and fleet calls."""

from .auth import (
    AzureError,
    AzureAuthError,
    AzureNotFoundError,
    AzureValidationError,
    AzureAPIError,
    AzureAuthorizationError,
    PreconditionError,
    AzureSession,
    get_azure_credential,
    list_subscriptions,
    wrap_azure_error,
)
from .fleet import FleetClient
from .models import (
    SubscriptionInfo,
    VmInfo,
    TagMap,
    TagChange,
    ShutdownAction,
    ShutdownRecord,
    ShutdownResult,
)

__all__ = [
    "AzureError",
    "AzureAuthError",
    "AzureNotFoundError",
    "AzureValidationError",
    "AzureAPIError",
    "AzureAuthorizationError",
    "PreconditionError",
    "AzureSession",
    "get_azure_credential",
    "list_subscriptions",
    "wrap_azure_error",
    "FleetClient",
    "SubscriptionInfo",
    "VmInfo",
    "TagMap",
    "TagChange",
    "ShutdownAction",
    "ShutdownRecord",
    "ShutdownResult",
]
