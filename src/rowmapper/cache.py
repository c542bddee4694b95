"""
Plan caching.

Each mapper owns one PlanCache mapping record types to their plans. Entries
are never evicted: a plan lives as long as the mapper that built it.
"""
import logging
import math
import threading
from typing import Any

import cachetools

logger = logging.getLogger(__name__)

__all__ = ['PlanCache']


class PlanCache:
    """Thread-safe, unbounded cache of record plans keyed by record type.

    Lookups do not lock. Inserts are serialized; two threads building a plan
    for the same type at once both succeed and the last insert wins, which
    is harmless since plans for one type are interchangeable.
    """

    def __init__(self) -> None:
        self._plans = cachetools.Cache(maxsize=math.inf)
        self._lock = threading.RLock()

    def get(self, record_type: type) -> Any:
        plan = self._plans.get(record_type)
        if plan is None:
            logger.debug(f'Plan cache miss for {record_type.__name__}')
        else:
            logger.debug(f'Plan cache hit for {record_type.__name__}')
        return plan

    def put(self, record_type: type, plan: Any) -> Any:
        with self._lock:
            self._plans[record_type] = plan
        return plan

    def clear(self) -> None:
        with self._lock:
            self._plans.clear()

    def types(self) -> list[type]:
        with self._lock:
            return list(self._plans.keys())

    def __contains__(self, record_type: type) -> bool:
        return record_type in self._plans

    def __len__(self) -> int:
        return len(self._plans)
