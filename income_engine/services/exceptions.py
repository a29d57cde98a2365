# income_engine/services/exceptions.py
"""
Service layer exceptions.

The calculators raise nothing on well-formed input: every ratio resolves
to 0 instead. These exceptions cover caller mistakes at the service
boundary (bad window sizes, impossible years, unparseable payloads).

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   ├── InvalidWindowError
    │   └── InvalidYearError
    └── PayloadError
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when a programmatic argument is invalid.

    This is NOT user input validation (positivity of quantities and the
    like belongs to the form layer that feeds the engine).

    Attributes:
        field: The argument that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidWindowError(ValidationError):
    """Raised when a rolling income window shorter than one month is requested."""

    def __init__(self, months: int) -> None:
        self.months = months
        super().__init__(
            f"Invalid rolling window: {months} months. Must be at least 1",
            field="months",
        )


class InvalidYearError(ValidationError):
    """Raised when a fixed-year report is requested for an impossible year."""

    def __init__(self, year: int) -> None:
        self.year = year
        super().__init__(
            f"Invalid report year: {year}. Must be between 1 and 9999",
            field="year",
        )


# =============================================================================
# PAYLOAD ERRORS
# =============================================================================


class PayloadError(ServiceError):
    """
    Raised when a collaborator payload cannot be parsed into domain objects.

    Attributes:
        source: Which payload failed ("transactions" or "market_data")
        errors: Error details reported by the schema layer
    """

    def __init__(self, source: str, errors: list[dict] | None = None) -> None:
        self.source = source
        self.errors = errors or []
        super().__init__(
            f"Could not parse {source} payload ({len(self.errors)} error(s))"
        )
