"""Exception types and ledger error categories."""


class ErrorCategory:
    """Machine-readable categories recorded on failed refresh outcomes."""

    MISSING_CREDENTIALS = "missing_credentials"
    LEASE_UNAVAILABLE = "lease_unavailable"
    PLATFORM_ERROR = "platform_error"
    TRANSPORT_ERROR = "transport_error"
    # Platform already rotated the token but the new one was not stored
    PERSIST_ERROR = "persist_error"
    UNEXPECTED_ERROR = "unexpected_error"


class CronError(Exception):
    """Base exception for cron run errors."""

    def __init__(self, message: str, code: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.original_error = original_error


class CredentialStoreError(CronError):
    """Error reading or writing shop credentials."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message, "CREDENTIAL_STORE_ERROR", original_error)


class ShopNotFoundError(CredentialStoreError):
    """Shop credential row no longer exists."""

    def __init__(self, shop_id: int):
        super().__init__(f"Shop {shop_id} no longer exists")
        self.code = "SHOP_NOT_FOUND"
        self.shop_id = shop_id


class JobInvocationError(CronError):
    """Remote job invocation failed."""

    def __init__(self, job_name: str, message: str, original_error: Exception | None = None):
        super().__init__(message, "JOB_INVOCATION_ERROR", original_error)
        self.job_name = job_name
