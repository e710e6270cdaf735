"""
Results channel: pushes recomputed rankings to live subscribers.

Subscribers register a callback per decision. Whenever ratings or options of
a decision change, the API recomputes the full ranking and publishes it;
there is no incremental update and no debouncing.
"""
from collections import defaultdict
from threading import Lock
from typing import Callable, Dict, List
import logging
from pickmate.services.ranking_service import build_results

logger = logging.getLogger(__name__)

Snapshot = dict
Subscriber = Callable[[Snapshot], None]


class ResultsChannel:
    """In-process publish/subscribe keyed by decision id."""

    def __init__(self):
        self._subscribers: Dict[int, List[Subscriber]] = defaultdict(list)
        self._lock = Lock()

    def subscribe(self, decision_id: int, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that removes it."""
        with self._lock:
            self._subscribers[decision_id].append(callback)

        def unsubscribe():
            with self._lock:
                callbacks = self._subscribers.get(decision_id, [])
                if callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(decision_id, None)

        return unsubscribe

    def subscriber_count(self, decision_id: int) -> int:
        with self._lock:
            return len(self._subscribers.get(decision_id, []))

    def publish(self, decision_id: int, snapshot: Snapshot) -> int:
        """Deliver a snapshot to every subscriber of the decision; returns how many got it."""
        with self._lock:
            callbacks = list(self._subscribers.get(decision_id, []))

        delivered = 0
        for callback in callbacks:
            try:
                callback(snapshot)
                delivered += 1
            except Exception as e:
                logger.error(f"Results subscriber for decision {decision_id} failed: {e}", exc_info=True)
        return delivered


results_channel = ResultsChannel()


def publish_results(decision_id: int, db) -> dict:
    """Recompute a decision's ranking and push it to live subscribers."""
    snapshot = build_results(decision_id, db).to_dict()
    results_channel.publish(decision_id, snapshot)
    return snapshot
