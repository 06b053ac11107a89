"""
Error taxonomy for the conversion pipeline and bulk import.

Every failure the service can report maps onto one of these classes; the
routes turn them into HTTP statuses.
"""


class LeadBridgeError(Exception):
    """Base class for all service errors."""


class MissingFields(LeadBridgeError):
    """Inbound CRM event is malformed or incomplete."""


class MissingIdentity(LeadBridgeError):
    """Neither an email nor a phone survived normalization."""


class ConfigurationError(LeadBridgeError):
    """Required credentials are not configured."""


class StoreError(LeadBridgeError):
    """Reading from or writing to the lead store failed."""


class DispatchError(LeadBridgeError):
    """The outbound call to the advertising API failed or was rejected."""

    def __init__(self, message: str, *, status_code: int | None = None, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ImportRowError(LeadBridgeError):
    """A single row of a bulk import could not be converted or written."""

    def __init__(self, message: str, *, index: int, lead_id: str | None = None):
        super().__init__(f"row {index}: {message}")
        self.index = index
        self.lead_id = lead_id
