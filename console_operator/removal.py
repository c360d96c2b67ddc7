"""
Teardown of everything the operator created, for managementState: Removed.

Fail-open: every action is attempted no matter what happened to the ones
before it. Outcomes are collected in order, not-found outcomes are dropped
(the object is already gone, which is the goal), and anything left over is
raised as one RemovalAggregateError. Running it again is always safe.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from . import metrics
from . import subresources
from .config import Settings
from .context import SyncContext
from .errors import RemovalAggregateError, filter_out, is_not_found
from .services.kubernetes_service import ClusterService
from .subresources import OwnedResource

logger = logging.getLogger("console-operator.removal")

# Errors in this list mean the resource is already in its removed state.
IGNORABLE_ERRORS = (is_not_found,)


@dataclass(frozen=True)
class RemovalOutcome:
    action: str
    resource: OwnedResource
    error: Optional[Exception] = None

    @property
    def ignorable(self) -> bool:
        return self.error is not None and any(pred(self.error) for pred in IGNORABLE_ERRORS)


class RemovalExecutor:

    def __init__(self, cluster: ClusterService, settings: Optional[Settings] = None):
        self.cluster = cluster
        self.settings = settings or cluster.settings

    def _attempt(self, action: str, resource: OwnedResource, fn: Callable[[], object]) -> RemovalOutcome:
        try:
            fn()
        except Exception as e:
            return RemovalOutcome(action, resource, e)
        return RemovalOutcome(action, resource)

    def _deregister_oauth_client(self, ctx: SyncContext) -> List[RemovalOutcome]:
        # shared cluster-wide: never deleted, only stripped of the console's redirects
        ref = subresources.oauth_client_stub()
        existing = None

        def get():
            nonlocal existing
            existing = self.cluster.get_oauth_client(ctx, ref.name)

        outcomes = [self._attempt("get", ref, get)]
        if existing is None:
            return outcomes
        if not existing.get("redirectURIs"):
            logger.debug(f"{ref} has no redirect URIs, nothing to deregister")
            return outcomes
        updated = subresources.deregister_console_from_oauth_client(existing)
        outcomes.append(self._attempt("update", ref, lambda: self.cluster.update_oauth_client(ctx, updated)))
        return outcomes

    def execute(self, ctx: SyncContext) -> List[RemovalOutcome]:
        """
        Remove the console's resources.

        Returns the ordered outcomes when nothing but not-found errors
        occurred; raises RemovalAggregateError otherwise.
        """
        s = self.settings
        cluster = self.cluster
        logger.info("deleting console resources")

        outcomes: List[RemovalOutcome] = []
        for ref, delete in (
            (subresources.config_map_stub(s), cluster.delete_config_map),
            (subresources.service_ca_stub(s), cluster.delete_config_map),
            (subresources.secret_stub(s), cluster.delete_secret),
        ):
            outcomes.append(self._attempt("delete", ref, lambda: delete(ctx, ref.name, ref.namespace)))

        outcomes.extend(self._deregister_oauth_client(ctx))

        ref = subresources.deployment_stub(s)
        outcomes.append(self._attempt("delete", ref,
                                      lambda: cluster.delete_deployment(ctx, ref.name, ref.namespace)))

        # the public config map belongs to another component; only clear our field
        required = subresources.empty_public_config(s)
        outcomes.append(self._attempt("apply", subresources.public_config_stub(s),
                                      lambda: cluster.apply_config_map(ctx, required)))

        for outcome in outcomes:
            if outcome.ignorable:
                logger.info(f"{outcome.resource} not found during {outcome.action}, skipping")

        errors = filter_out((o.error for o in outcomes), *IGNORABLE_ERRORS)
        logger.info("finished deleting console resources")
        if errors:
            for outcome in outcomes:
                if outcome.error is not None and not outcome.ignorable:
                    logger.error(f"failed to {outcome.action} {outcome.resource}: {outcome.error}")
                    metrics.removal_failures_total.labels(resource=str(outcome.resource)).inc()
            raise RemovalAggregateError(errors, outcomes)
        return outcomes
