"""Error handling for provisioning requests.

- ErrorCode: Standard error codes for API failures
- ProvisioningError/ProvisioningException: Structured errors and exceptions
- classify_status: HTTP status to ErrorCode mapping
"""

from .errors import ErrorCode, ProvisioningError, ProvisioningException, classify_status

__all__ = ["ErrorCode", "ProvisioningError", "ProvisioningException", "classify_status"]
