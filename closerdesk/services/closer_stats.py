import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable

from sqlalchemy.orm import Session

from closerdesk.models.appointment import Appointment


@dataclass(frozen=True)
class CloserStats:
    total_calls: int = 0
    total_conversions: int = 0
    total_revenue: float = 0.0
    conversion_rate: float = 0.0


def _money(value) -> float:
    if value is None:
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(amount) else amount


def compute_closer_stats(appointments: Iterable) -> CloserStats:
    """
    The one place closer performance is calculated.

    ``appointments`` are the rows assigned to a single closer; anything with
    ``outcome`` and ``sale_value`` attributes will do.
    """
    total_calls = 0
    total_conversions = 0
    total_revenue = 0.0

    for apt in appointments:
        total_calls += 1
        if apt.outcome == "converted":
            total_conversions += 1
            total_revenue += _money(apt.sale_value)

    conversion_rate = total_conversions / total_calls if total_calls > 0 else 0.0
    return CloserStats(
        total_calls=total_calls,
        total_conversions=total_conversions,
        total_revenue=round(total_revenue, 2),
        conversion_rate=conversion_rate,
    )


def stats_label(name: str, stats: CloserStats) -> str:
    """Dropdown label used by the manual assignment picker."""
    return f"{name} ({stats.total_calls} calls, {stats.conversion_rate * 100:.1f}% conv.)"


class CloserStatsService:
    def __init__(self, db: Session):
        self.db = db

    def _rows(self):
        return self.db.query(Appointment.closer_id, Appointment.outcome, Appointment.sale_value)

    def stats_for(self, closer_id: str) -> CloserStats:
        rows = self._rows().filter(Appointment.closer_id == closer_id).all()
        return compute_closer_stats(rows)

    def stats_by_closer(self) -> Dict[str, CloserStats]:
        """Stats for every closer holding at least one appointment."""
        grouped = defaultdict(list)
        for row in self._rows().filter(Appointment.closer_id.isnot(None)).all():
            grouped[row.closer_id].append(row)
        return {closer_id: compute_closer_stats(rows) for closer_id, rows in grouped.items()}
