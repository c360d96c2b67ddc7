"""
The sync cycle: fetch configs, then act on the operator's management state.

  Managed   → run the reconciler, write back the status it returns
  Unmanaged → do nothing at all
  Removed   → tear down every resource the operator owns
  anything else → UnknownManagementStateError
"""
import logging
import time
from typing import Optional

from . import metrics
from .aggregator import fetch_configs
from .config import Settings
from .context import SyncContext
from .errors import UnknownManagementStateError
from .models import ConfigSnapshot, ManagementState
from .reconciler import ObservedGenerationReconciler, Reconciler
from .removal import RemovalExecutor
from .services.kubernetes_service import ClusterService

logger = logging.getLogger("console-operator")


class ConsoleOperator:

    def __init__(self, cluster: ClusterService, reconciler: Optional[Reconciler] = None,
                 remover: Optional[RemovalExecutor] = None, settings: Optional[Settings] = None):
        self.cluster = cluster
        self.settings = settings or cluster.settings
        self.reconciler = reconciler or ObservedGenerationReconciler()
        self.remover = remover or RemovalExecutor(cluster, self.settings)

    def sync(self, ctx: SyncContext):
        """Entry point for one cycle. Returns None on success, raises otherwise."""
        start = time.monotonic()
        snapshot = fetch_configs(self.cluster, ctx)
        logger.debug(f"started syncing operator {snapshot.operator.name!r}")
        try:
            self.handle_sync(ctx, snapshot)
        finally:
            logger.debug(
                f"finished syncing operator {snapshot.operator.name!r} "
                f"({time.monotonic() - start:.3f}s)"
            )

    def handle_sync(self, ctx: SyncContext, snapshot: ConfigSnapshot):
        working = snapshot.operator.model_copy(deep=True)
        state = working.managementState
        metrics.record_state(state)

        if state == ManagementState.MANAGED:
            logger.debug("console is in a managed state.")
            self._sync_managed(ctx, working.status, snapshot)
        elif state == ManagementState.UNMANAGED:
            logger.debug("console is in an unmanaged state.")
        elif state == ManagementState.REMOVED:
            logger.debug("console has been removed.")
            self.remover.execute(ctx)
        else:
            raise UnknownManagementStateError(state)

    def _sync_managed(self, ctx, status, snapshot: ConfigSnapshot):
        updated = self.reconciler.sync(ctx, status, snapshot)
        if updated == snapshot.operator.status:
            return
        body = updated.model_dump(exclude_none=True)
        # merge patch: fields the reconciler dropped are cleared with null
        for key in snapshot.operator.status.model_dump(exclude_none=True):
            body.setdefault(key, None)
        self.cluster.update_operator_status(ctx, snapshot.operator.name, body)
        logger.info(f"operator {snapshot.operator.name!r} status updated")
