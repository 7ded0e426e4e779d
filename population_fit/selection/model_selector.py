"""Order search: pick how many components (or trials) the data supports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from population_fit.fitting.models import FitCandidate
from population_fit.interfaces.fit_logger import FitLogger, NullFitLogger
from population_fit.selection.constraints import mixture_is_identifiable

FitOrder = Callable[[int], Optional[FitCandidate]]


@dataclass
class StoppingState:
    """Call-scoped bookkeeping for one order search.

    ``best_ic`` holds whichever score the search ranks by (the sum of squares for
    the trial-count search).
    """

    best_ic: float = float("inf")
    best_order: Optional[int] = None
    consecutive_worse: int = 0
    previous_ic: float = float("inf")

    def record_best(self, order: int, score: float) -> bool:
        if score < self.best_ic:
            self.best_ic = score
            self.best_order = order
            return True
        return False


@dataclass
class MixtureSelection:
    best: Optional[FitCandidate] = None
    best_multi: Optional[FitCandidate] = None
    tried: List[int] = field(default_factory=list)


def select_trial_count(
    fit_order: FitOrder,
    trial_counts: Iterable[int],
    *,
    worse_limit: int = 3,
    fit_logger: FitLogger | None = None,
) -> Optional[FitCandidate]:
    """Scan trial counts in order, keeping the lowest sum of squares.

    Counts that yield no candidate are skipped. Once a best exists the scan stops
    after worse_limit consecutive counts fail to beat it.
    """

    fit_logger = fit_logger or NullFitLogger()
    state = StoppingState()
    best: Optional[FitCandidate] = None
    for n in trial_counts:
        candidate = fit_order(n)
        if candidate is None:
            continue
        if state.record_best(n, candidate.sum_of_squares):
            best = candidate
            state.consecutive_worse = 0
        elif best is not None:
            state.consecutive_worse += 1
            if state.consecutive_worse >= worse_limit:
                fit_logger.debug("Stopping at N=%d after %d worse fits", n, state.consecutive_worse)
                break
    return best


def select_mixture_order(
    single: Optional[FitCandidate],
    fit_order: FitOrder,
    *,
    max_order: int,
    min_fraction: float,
    min_difference: float,
    fit_logger: FitLogger | None = None,
) -> MixtureSelection:
    """Grow a mixture from order 2 while it stays identifiable and its IC keeps falling.

    ``single`` is the already fitted one-component model (or None when that fit
    failed). The search stops at the first order that fails to fit, fails the
    identifiability checks or scores a worse IC than the order before it.
    """

    fit_logger = fit_logger or NullFitLogger()
    state = StoppingState()
    selection = MixtureSelection()
    if single is not None:
        state.record_best(1, single.information_criterion)
        state.previous_ic = single.information_criterion
        selection.best = single
        selection.tried.append(1)

    best_multi_ic = float("inf")
    for order in range(2, max_order + 1):
        candidate = fit_order(order)
        selection.tried.append(order)
        if candidate is None:
            fit_logger.info("Failed to fit N=%d", order)
            break
        if not mixture_is_identifiable(
            candidate.coefficients, candidate.fractions, min_fraction, min_difference, fit_logger
        ):
            break
        if state.record_best(order, candidate.information_criterion):
            selection.best = candidate
        if candidate.information_criterion < best_multi_ic:
            best_multi_ic = candidate.information_criterion
            selection.best_multi = candidate
        if candidate.information_criterion > state.previous_ic:
            fit_logger.debug(
                "IC for N=%d is worse than N=%d: %s > %s",
                order,
                order - 1,
                f"{candidate.information_criterion:.4g}",
                f"{state.previous_ic:.4g}",
            )
            break
        state.previous_ic = candidate.information_criterion
    return selection


__all__ = ["FitOrder", "MixtureSelection", "StoppingState", "select_mixture_order", "select_trial_count"]
