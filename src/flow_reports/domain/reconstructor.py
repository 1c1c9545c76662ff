"""
Cumulative-flow reconstruction.

Replays shipments, transfers and inventory snapshots in date order to derive
a running inventory level and the consumption implied by it. Snapshots are
ground truth (someone counted the stock); shipments and transfers are deltas.

Ordering invariant: events are stable-sorted by date only, so events sharing
a date keep arrival order: shipments, transfers in, transfers out, snapshots.
A snapshot is therefore always the closing count of its day.
"""
import logging
import math
from typing import Iterable, List, Optional, Sequence

from flow_reports.domain.model import (
    DataPoint,
    FlowEvent,
    FlowReport,
    Shipment,
    Snapshot,
    TransferIn,
    TransferOut,
    UsageStats,
)

logger = logging.getLogger(__name__)


def merge_events(
    shipments: Iterable[FlowEvent] = (),
    transfers_in: Iterable[FlowEvent] = (),
    transfers_out: Iterable[FlowEvent] = (),
    snapshots: Iterable[FlowEvent] = (),
) -> List[FlowEvent]:
    """Merge the four event collections into one chronological stream."""
    arrived = [*shipments, *transfers_in, *transfers_out, *snapshots]
    dated = [e for e in arrived if e.date is not None]
    if len(dated) != len(arrived):
        logger.debug("Dropped %d events without a date", len(arrived) - len(dated))

    # sorted() is stable: same-day events stay in arrival order
    return sorted(dated, key=lambda e: e.date)


def replay(events: Sequence[FlowEvent]) -> List[DataPoint]:
    """
    Replay chronologically ordered events into one data point per event.

    Before the first snapshot (the baseline) nothing is assumed consumed, so
    inventory follows cumulative received. From the baseline on, snapshots
    override the running level and flow events adjust it.
    """
    cumulative_received = 0
    current_inventory = 0
    has_baseline = False
    points = []

    for event in events:
        if isinstance(event, Snapshot):
            current_inventory = event.quantity
            has_baseline = True
        elif isinstance(event, (Shipment, TransferIn, TransferOut)):
            # TransferOut quantities are already negative
            cumulative_received += event.quantity
            if has_baseline:
                current_inventory += event.quantity
            elif not isinstance(event, TransferOut):
                current_inventory = cumulative_received
        else:
            raise TypeError(f"Unsupported flow event: {event!r}")

        points.append(
            DataPoint(
                date=event.date,
                cumulative_received=cumulative_received,
                cumulative_used=max(0, cumulative_received - current_inventory),
                current_inventory=current_inventory,
                event_type=event.event_type,
                event_details=event.label,
            )
        )

    return points


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_usage_stats(points: Sequence[DataPoint]) -> Optional[UsageStats]:
    """Summarise a replayed series. Returns None for an empty series."""
    if not points:
        return None

    first, last = points[0], points[-1]
    total_consumed = max(0, last.cumulative_used)
    days_of_data = max(1, _round_half_up((last.date - first.date).days))
    average_daily_usage = max(0.0, total_consumed / days_of_data)

    if average_daily_usage > 0:
        projected = max(0, _round_half_up(last.current_inventory / average_daily_usage))
    else:
        projected = 0

    return UsageStats(
        total_consumed=total_consumed,
        average_daily_usage=average_daily_usage,
        days_of_data=days_of_data,
        projected_days_remaining=projected,
    )


def reconstruct(
    shipments: Iterable[FlowEvent] = (),
    transfers_in: Iterable[FlowEvent] = (),
    transfers_out: Iterable[FlowEvent] = (),
    snapshots: Iterable[FlowEvent] = (),
) -> FlowReport:
    """Merge, replay and summarise one site/lot (or all-sites) event set."""
    events = merge_events(shipments, transfers_in, transfers_out, snapshots)
    points = replay(events)
    stats = compute_usage_stats(points)
    logger.debug("Reconstructed %d data points", len(points))
    return FlowReport(data_points=points, stats=stats)
