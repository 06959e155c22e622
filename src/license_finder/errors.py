from __future__ import annotations


class LicenseFinderError(Exception):
    """Base class for errors raised by license-finder."""


class ConfigError(LicenseFinderError, ValueError):
    pass


class CollectionError(LicenseFinderError):
    pass


class ReportError(LicenseFinderError, ValueError):
    """Raised (or returned in a RenderResult) when license data cannot be rendered."""


class InvalidInputError(ReportError):
    def __init__(self, received: object) -> None:
        self.received = received
        super().__init__(
            f"license data must be a list of module records, got {type(received).__name__}"
        )


class EmptyInputError(ReportError):
    def __init__(self) -> None:
        super().__init__("must have at least one module in data")
