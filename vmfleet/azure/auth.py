"""Azure authentication, session and error types.

Provides Azure authentication using DefaultAzureCredential, with
ClientSecretCredential when a service principal is configured.

Environment Variables:
    AZURE_TENANT_ID: Azure Active Directory tenant ID
    AZURE_CLIENT_ID: Service principal client ID
    AZURE_CLIENT_SECRET: Service principal client secret
    AZURE_SUBSCRIPTION_ID: Subscription to operate on
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import Settings
from .models import SubscriptionInfo

logger = logging.getLogger(__name__)


# =============================================================================
# Custom Exceptions
# =============================================================================

class AzureError(Exception):
    """Base exception for Azure operations."""

    def __init__(self, message: str, error_type: str = "AzureError", details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for logs and reports."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "details": self.details,
        }


class AzureAuthError(AzureError):
    """Raised when Azure authentication fails."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "AuthenticationError", details)


class AzureNotFoundError(AzureError):
    """Raised when an Azure resource is not found."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "NotFoundError", details)


class AzureValidationError(AzureError):
    """Raised when Azure rejects a request as invalid."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "ValidationError", details)


class AzureAPIError(AzureError):
    """Raised when an Azure API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict] = None):
        details = details or {}
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, "AzureAPIError", details)


class AzureAuthorizationError(AzureError):
    """Raised when authorization to an Azure resource fails."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "AuthorizationError", details)


class PreconditionError(AzureError):
    """Raised when a run cannot start: bad config, no login, nothing to act on.

    Fatal: the CLI reports it and exits with status 1.
    """

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "PreconditionFailure", details)


def wrap_azure_error(exception: Exception) -> AzureError:
    """Wrap an Azure SDK exception into our consistent error format.

    Args:
        exception: Original Azure SDK exception

    Returns:
        Wrapped AzureError subclass
    """
    if isinstance(exception, AzureError):
        return exception

    error_str = str(exception).lower()
    error_details = {"original_error": str(exception)}

    status_code = getattr(exception, "status_code", None)
    if status_code:
        error_details["status_code"] = status_code

    if "authentication" in error_str or "credential" in error_str:
        return AzureAuthError(str(exception), error_details)

    if "authorization" in error_str or "forbidden" in error_str or status_code == 403:
        return AzureAuthorizationError(str(exception), error_details)

    if "not found" in error_str or status_code == 404:
        return AzureNotFoundError(str(exception), error_details)

    if "validation" in error_str or "invalid" in error_str or status_code == 400:
        return AzureValidationError(str(exception), error_details)

    return AzureAPIError(str(exception), status_code, error_details)


# =============================================================================
# Credential and Session
# =============================================================================

def get_azure_credential(settings: Settings):
    """Create an Azure credential for this run.

    Uses ClientSecretCredential when a full service principal is configured,
    otherwise DefaultAzureCredential, which tries in order:
    1. Environment variables
    2. Managed Identity
    3. Azure CLI (if logged in via 'az login')
    4. Azure PowerShell

    Raises:
        AzureAuthError: If no credential could be created
    """
    from azure.identity import ClientSecretCredential, DefaultAzureCredential

    try:
        if settings.has_service_principal:
            logger.info("Using ClientSecretCredential with service principal")
            return ClientSecretCredential(
                tenant_id=settings.azure_tenant_id,
                client_id=settings.azure_client_id,
                client_secret=settings.azure_client_secret,
            )
        logger.info("Using DefaultAzureCredential")
        return DefaultAzureCredential()
    except Exception as e:
        logger.error(f"Failed to create Azure credential: {e}")
        raise AzureAuthError(
            f"Failed to create Azure credential: {str(e)}",
            details={"original_error": str(e)}
        )


def list_subscriptions(credential) -> List[SubscriptionInfo]:
    """List subscriptions accessible with the credential.

    This is the first call of every run, so it doubles as the login check.

    Raises:
        PreconditionError: If the listing fails (typically not logged in)
    """
    from azure.mgmt.resource import SubscriptionClient

    logger.info("Listing Azure subscriptions")
    try:
        client = SubscriptionClient(credential)
        subscriptions = [
            SubscriptionInfo(
                subscription_id=sub.subscription_id,
                display_name=sub.display_name or sub.subscription_id,
                state=str(getattr(sub.state, "value", sub.state) or "Unknown"),
                tenant_id=sub.tenant_id or "",
            )
            for sub in client.subscriptions.list()
        ]
    except Exception as e:
        wrapped = wrap_azure_error(e)
        raise PreconditionError(
            f"Could not list subscriptions. Are you logged in (az login)? {wrapped.message}",
            details=wrapped.to_dict(),
        )

    logger.info(f"Found {len(subscriptions)} subscriptions")
    return subscriptions


@dataclass
class AzureSession:
    """Login session for one run.

    Acquired once at startup and passed explicitly to every collaborator
    that talks to Azure. SDK clients are built on first use.
    """

    credential: Any
    subscription_id: str
    subscription_name: str = ""
    _compute: Any = field(default=None, repr=False)
    _resources: Any = field(default=None, repr=False)

    @property
    def compute(self):
        """ComputeManagementClient bound to this session's subscription."""
        if self._compute is None:
            from azure.mgmt.compute import ComputeManagementClient
            self._compute = ComputeManagementClient(self.credential, self.subscription_id)
        return self._compute

    @property
    def resources(self):
        """ResourceManagementClient bound to this session's subscription."""
        if self._resources is None:
            from azure.mgmt.resource import ResourceManagementClient
            self._resources = ResourceManagementClient(self.credential, self.subscription_id)
        return self._resources

    def close(self) -> None:
        """Close SDK clients and the credential."""
        for client in (self._compute, self._resources):
            if client is not None:
                client.close()
        close = getattr(self.credential, "close", None)
        if callable(close):
            close()
