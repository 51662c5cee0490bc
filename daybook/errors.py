from __future__ import annotations


class DaybookError(ValueError):
    """Base class for domain errors raised to callers for display."""


class InvalidStackIndexError(DaybookError):
    def __init__(self) -> None:
        super().__init__("Invalid stack index")


class InstanceNotCompletedError(DaybookError):
    def __init__(self) -> None:
        super().__init__("Activity instance is not completed")


class PreviousDayRestartError(DaybookError):
    def __init__(self) -> None:
        super().__init__("Cannot restart activity from a previous day")


class RecordNotFoundError(DaybookError):
    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind} not found")
        self.kind = kind
