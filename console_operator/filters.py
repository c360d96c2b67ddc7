"""
Name-based event filters.

A filter decides whether a changed object should schedule a sync. Matching
is exact and case-sensitive on metadata.name.
"""
from typing import Any, Callable, Optional

EventFilter = Callable[[Any], bool]


def _meta_field(obj: Any, field: str) -> Optional[str]:
    # kopf bodies and plain dicts vs. kubernetes client models
    if hasattr(obj, "get"):
        return (obj.get("metadata") or {}).get(field)
    metadata = getattr(obj, "metadata", None)
    return getattr(metadata, field, None)


def names_filter(*names: str) -> EventFilter:
    name_set = frozenset(names)

    def matches(obj: Any) -> bool:
        return _meta_field(obj, "name") in name_set

    return matches


def as_when(event_filter: EventFilter, namespace: Optional[str] = None):
    """
    Adapt a filter to kopf's `when=` callback.

    With a namespace, namespaced objects outside it are rejected;
    cluster-scoped objects carry no namespace and are only name-checked.
    """
    def when(body, **_) -> bool:
        if namespace is not None:
            obj_ns = _meta_field(body, "namespace")
            if obj_ns is not None and obj_ns != namespace:
                return False
        return event_filter(body)

    return when
