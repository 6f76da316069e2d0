# ===== SERVICES INTEGRATION LAYER =====
"""
Shared service layer for the flight school backend.
Provides the common exception hierarchy used by every app's service module.
"""


# =============================================================================
# SERVICE INTEGRATION EXCEPTIONS
# =============================================================================

class ServiceIntegrationError(Exception):
    """Base exception for service integration errors."""
    pass


class FlightTimeError(ServiceIntegrationError):
    """Raised when flight time values cannot be parsed or are inconsistent."""
    pass


class ReferenceDataError(ServiceIntegrationError):
    """Raised when a referenced record (pilot, aircraft, ICAO type, role) does not exist."""
    pass


class ExternalDatasetError(ServiceIntegrationError):
    """Raised when an external reference dataset cannot be downloaded or read."""
    pass


class DuplicateRecordError(ServiceIntegrationError):
    """
    Raised when a create operation would duplicate an existing record.

    ``details`` carries whatever the caller needs to describe the conflict
    (existing codes, names, ids).
    """

    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}
