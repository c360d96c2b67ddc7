"""
Contract for the version-specific reconciler run in the Managed state.
"""
import logging
from typing import Protocol

from .context import SyncContext
from .models import ConfigSnapshot, OperatorStatus

logger = logging.getLogger("console-operator.reconciler")


class Reconciler(Protocol):
    """
    Converges the console's operand resources toward the snapshot.

    Called on every Managed cycle, so it must be idempotent. It gets a
    private copy of the operator status and returns the new status; the
    cycle writes that back. Anything it raises ends the cycle unchanged.
    """

    def sync(self, ctx: SyncContext, status: OperatorStatus,
             snapshot: ConfigSnapshot) -> OperatorStatus:
        ...


class ObservedGenerationReconciler:
    """Default reconciler: reports the operator config generation it has seen."""

    def sync(self, ctx: SyncContext, status: OperatorStatus,
             snapshot: ConfigSnapshot) -> OperatorStatus:
        generation = snapshot.operator.generation
        if status.observedGeneration == generation:
            return status
        logger.debug(f"observed generation {status.observedGeneration} -> {generation}")
        return status.model_copy(update={"observedGeneration": generation})
