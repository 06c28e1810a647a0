"""Selection ledger: the opportunities a user chose to pursue.

The ledger is a plain object owned by whoever composes the application
(see app.state.DashboardState) and passed explicitly to its consumers.
Observers register on the ledger itself and receive the full current
selection after every effective change.
"""

import logging
from typing import Callable, Union

from ..exceptions import LedgerReentryError
from .models import SelectedOpportunity

logger = logging.getLogger(__name__)

Subscriber = Callable[[list[SelectedOpportunity]], None]
OpportunityRef = Union[SelectedOpportunity, tuple[str, str]]


def _key(opportunity: OpportunityRef) -> tuple[str, str]:
    if isinstance(opportunity, SelectedOpportunity):
        return opportunity.key
    category, detail = opportunity
    return (category, detail)


class SelectionLedger:
    """
    In-memory set of SelectedOpportunity keyed by (category, detail).

    Mutations that change nothing (selecting twice, deselecting an
    absent entry, clearing an empty ledger) do not notify. Subscribers
    must not mutate the ledger from their callback; doing so raises
    LedgerReentryError (a RuntimeError). Any other subscriber failure
    is logged and the remaining subscribers are still notified.
    """

    def __init__(self) -> None:
        self._selected: dict[tuple[str, str], SelectedOpportunity] = {}
        self._subscribers: list[Subscriber] = []
        self._notifying = False

    def _check_not_notifying(self) -> None:
        if self._notifying:
            raise LedgerReentryError("SelectionLedger cannot be mutated from a subscriber callback")

    def _notify(self) -> None:
        snapshot = self.get_all()
        reentry = None
        self._notifying = True
        try:
            for callback in list(self._subscribers):
                try:
                    callback(snapshot)
                except LedgerReentryError as e:
                    reentry = e
                except Exception as e:
                    logger.error("[LEDGER] Subscriber %r failed: %s", callback, e)
        finally:
            self._notifying = False
        if reentry is not None:
            raise reentry

    def select(self, opportunity: SelectedOpportunity) -> bool:
        """Add an opportunity. Returns False if it was already selected."""
        self._check_not_notifying()
        if opportunity.key in self._selected:
            return False
        self._selected[opportunity.key] = opportunity
        logger.info("[LEDGER] Selected %s", opportunity.label)
        self._notify()
        return True

    def deselect(self, opportunity: OpportunityRef) -> bool:
        """Remove an opportunity. Returns False if it was not selected."""
        self._check_not_notifying()
        removed = self._selected.pop(_key(opportunity), None)
        if removed is None:
            return False
        logger.info("[LEDGER] Deselected %s", removed.label)
        self._notify()
        return True

    def toggle(self, opportunity: SelectedOpportunity) -> bool:
        """Flip selection; returns the new selected state."""
        if self.is_selected(opportunity):
            self.deselect(opportunity)
            return False
        self.select(opportunity)
        return True

    def is_selected(self, opportunity: OpportunityRef) -> bool:
        return _key(opportunity) in self._selected

    def get_all(self) -> list[SelectedOpportunity]:
        """Selected opportunities in selection order (a copy)."""
        return list(self._selected.values())

    def clear(self) -> None:
        self._check_not_notifying()
        if not self._selected:
            return
        self._selected.clear()
        logger.info("[LEDGER] Cleared selection")
        self._notify()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an observer. Returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def __len__(self) -> int:
        return len(self._selected)
