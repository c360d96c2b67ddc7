"""
Error taxonomy for a sync cycle.

Every error raised out of ConsoleOperator.sync() ends the cycle; the
controller logs it and requeues with backoff. The only failures that are
ever suppressed are the ones matched by the ignore predicates below.
"""
from typing import Any, Callable, Iterable, List, Optional

from kubernetes.client import ApiException


class ConsoleOperatorError(Exception):
    """Base class for errors raised by the sync cycle."""


class ConfigFetchError(ConsoleOperatorError):
    """A singleton config object could not be fetched or parsed."""

    def __init__(self, kind: str, name: str, cause: Exception):
        self.kind = kind
        self.name = name
        self.cause = cause
        super().__init__(f"failed to fetch {kind} {name!r}: {cause}")


class UnknownManagementStateError(ConsoleOperatorError):

    def __init__(self, state: Any):
        self.state = state
        super().__init__(f"console is in an unknown state: {state!r}")


class RemovalAggregateError(ConsoleOperatorError):
    """One or more teardown actions failed for a reason other than not-found."""

    def __init__(self, errors: List[Exception], outcomes: Optional[list] = None):
        self.errors = list(errors)
        self.outcomes = list(outcomes or [])
        if len(self.errors) == 1:
            message = str(self.errors[0])
        else:
            message = "[" + ", ".join(str(e) for e in self.errors) + "]"
        super().__init__(message)


class CycleCancelledError(ConsoleOperatorError):
    """The caller cancelled the cycle or its deadline passed."""


# ---------------------------------------------------------------------------
# Ignore predicates
# ---------------------------------------------------------------------------

def is_not_found(err: Optional[BaseException]) -> bool:
    """True for a 404 from the API server."""
    return isinstance(err, ApiException) and err.status == 404


def filter_out(errors: Iterable[Optional[Exception]],
               *predicates: Callable[[Exception], bool]) -> List[Exception]:
    """Drop None entries and every error matched by any predicate, keeping order."""
    kept = []
    for err in errors:
        if err is None:
            continue
        if any(pred(err) for pred in predicates):
            continue
        kept.append(err)
    return kept
