"""Failure taxonomy for the intraday aggregation flow."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailureKind(str, Enum):
    INPUT_VALIDATION = "INPUT_VALIDATION"
    CONFIGURATION = "CONFIGURATION"
    TRANSPORT = "TRANSPORT"
    UPSTREAM_ADVISORY = "UPSTREAM_ADVISORY"
    UPSTREAM_CLIENT = "UPSTREAM_CLIENT"
    MISSING_SERIES = "MISSING_SERIES"


@dataclass(frozen=True)
class IntradayFailure:
    kind: FailureKind
    message: str


class UpstreamFetchError(Exception):
    """Raised when the outbound call to the upstream API cannot complete."""


class IntradayServiceError(Exception):
    def __init__(self, failure: IntradayFailure):
        super().__init__(failure.message)
        self.failure = failure

    @property
    def kind(self) -> FailureKind:
        return self.failure.kind
