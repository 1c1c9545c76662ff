"""Unit tests for cumulative-flow reconstruction and usage statistics."""
import pytest
from datetime import date, timedelta

from flow_reports.domain import reconstructor
from flow_reports.domain.model import (
    DataPoint,
    EventType,
    FlowEvent,
    Shipment,
    Snapshot,
    TransferIn,
    TransferOut,
)

D1 = date(2024, 1, 1)


def day(n):
    return D1 + timedelta(days=n)


def summary(points):
    return [(p.cumulative_received, p.cumulative_used, p.current_inventory) for p in points]


class TestMergeEvents:

    def test_orders_events_by_date(self):
        events = reconstructor.merge_events(
            shipments=[Shipment(day(10), 50)],
            snapshots=[Snapshot(day(5), 20)],
            transfers_in=[TransferIn(day(1), 5)],
        )
        assert [e.date for e in events] == [day(1), day(5), day(10)]

    def test_drops_events_without_a_date(self):
        events = reconstructor.merge_events(
            shipments=[Shipment(None, 50), Shipment(day(1), 10)],
        )
        assert len(events) == 1
        assert events[0].quantity == 10

    def test_same_day_flow_events_come_before_snapshot(self):
        events = reconstructor.merge_events(
            shipments=[Shipment(day(3), 50)],
            transfers_in=[TransferIn(day(3), 5)],
            transfers_out=[TransferOut(day(3), -10)],
            snapshots=[Snapshot(day(3), 30)],
        )
        assert [e.event_type for e in events] == [
            EventType.SHIPMENT,
            EventType.TRANSFER_IN,
            EventType.TRANSFER_OUT,
            EventType.SNAPSHOT,
        ]

    def test_input_order_kept_within_a_collection(self):
        first = Shipment(day(2), 10, "first")
        second = Shipment(day(2), 20, "second")
        events = reconstructor.merge_events(shipments=[first, second])
        assert events == [first, second]


class TestReplay:

    def test_concrete_scenario(self):
        points = reconstructor.replay([
            Shipment(day(0), 50),
            Snapshot(day(30), 40),
            Shipment(day(60), 50),
        ])
        assert summary(points) == [(50, 0, 50), (50, 10, 40), (100, 10, 90)]

    def test_received_is_monotonic_without_transfers_out(self):
        points = reconstructor.replay([
            Shipment(day(0), 10),
            TransferIn(day(1), 5),
            Snapshot(day(2), 3),
            Shipment(day(3), 20),
            Snapshot(day(4), 0),
        ])
        received = [p.cumulative_received for p in points]
        assert received == sorted(received)

    def test_flow_only_input_accumulates_received_into_inventory(self):
        quantities = [10, 5, 20, 7]
        points = reconstructor.replay([
            Shipment(day(0), 10),
            TransferIn(day(1), 5),
            Shipment(day(2), 20),
            TransferIn(day(3), 7),
        ])
        running = [sum(quantities[:i + 1]) for i in range(len(quantities))]
        assert [p.cumulative_received for p in points] == running
        assert [p.current_inventory for p in points] == running
        assert all(p.cumulative_used == 0 for p in points)

    def test_snapshot_overrides_running_inventory(self):
        points = reconstructor.replay([
            Shipment(day(0), 100),
            Snapshot(day(1), 7),
        ])
        assert points[-1].current_inventory == 7
        assert points[-1].cumulative_used == 93

    def test_usage_never_negative(self):
        # count higher than anything received
        points = reconstructor.replay([
            Shipment(day(0), 10),
            Snapshot(day(1), 25),
        ])
        assert all(p.cumulative_used >= 0 for p in points)
        assert points[-1].cumulative_used == 0

    def test_transfer_out_reduces_received(self):
        points = reconstructor.replay([
            Shipment(day(0), 50),
            TransferOut(day(1), -20),
        ])
        assert points[-1].cumulative_received == 30

    def test_transfer_out_after_baseline_reduces_inventory(self):
        points = reconstructor.replay([
            Shipment(day(0), 50),
            Snapshot(day(1), 40),
            TransferOut(day(2), -15),
        ])
        assert summary(points)[-1] == (35, 10, 25)

    def test_transfer_out_before_baseline_leaves_inventory(self):
        points = reconstructor.replay([
            Shipment(day(0), 50),
            TransferOut(day(1), -20),
        ])
        assert points[-1].current_inventory == 50
        assert points[-1].cumulative_used == 0

    def test_inventory_follows_received_before_first_snapshot(self):
        points = reconstructor.replay([
            Shipment(day(0), 10),
            TransferIn(day(1), 5),
            Shipment(day(2), 20),
        ])
        assert [p.current_inventory for p in points] == [10, 15, 35]

    def test_one_point_per_event_with_details(self):
        points = reconstructor.replay([
            Shipment(day(0), 10, "Ethanol - LOT1 @ Lab A"),
            Snapshot(day(1), 8, "Ethanol - LOT1 @ Lab A"),
        ])
        assert len(points) == 2
        assert points[1].event_type == EventType.SNAPSHOT
        assert points[1].event_details == "Ethanol - LOT1 @ Lab A"
        assert points[1].date == day(1)

    def test_unknown_event_type_raises(self):
        class Adjustment(FlowEvent):
            pass

        with pytest.raises(TypeError):
            reconstructor.replay([Adjustment(day(0), 5)])

    def test_empty_input(self):
        assert reconstructor.replay([]) == []


class TestUsageStats:

    def test_concrete_scenario(self):
        report = reconstructor.reconstruct(
            shipments=[Shipment(day(0), 50), Shipment(day(60), 50)],
            snapshots=[Snapshot(day(30), 40)],
        )
        stats = report.stats
        assert stats.total_consumed == 10
        assert stats.days_of_data == 60
        assert stats.average_daily_usage == pytest.approx(0.1667, abs=1e-3)
        assert stats.projected_days_remaining == 540

    def test_absent_for_empty_input(self):
        report = reconstructor.reconstruct()
        assert report.data_points == []
        assert report.stats is None
        assert report.to_dict() == {"data_points": [], "stats": None}

    def test_days_of_data_floor_for_single_day(self):
        points = reconstructor.replay([
            Shipment(day(0), 20),
            Snapshot(day(0), 15),
        ])
        stats = reconstructor.compute_usage_stats(points)
        assert stats.days_of_data == 1
        assert stats.total_consumed == 5
        assert stats.average_daily_usage == 5
        assert stats.projected_days_remaining == 3

    def test_no_projection_without_usage(self):
        stats = reconstructor.compute_usage_stats(
            reconstructor.replay([Shipment(day(0), 20), Shipment(day(10), 20)])
        )
        assert stats.total_consumed == 0
        assert stats.average_daily_usage == 0
        assert stats.projected_days_remaining == 0

    def test_projection_rounds_half_up(self):
        # 5 left at 2.5/day is exactly 2; 5 left at 2/day is 2.5 -> 3
        points = [
            DataPoint(day(0), 10, 0, 10, EventType.SHIPMENT, ""),
            DataPoint(day(2), 10, 5, 5, EventType.SNAPSHOT, ""),
        ]
        stats = reconstructor.compute_usage_stats(points)
        assert stats.average_daily_usage == 2.5
        assert stats.projected_days_remaining == 2

        points = [
            DataPoint(day(0), 10, 0, 10, EventType.SHIPMENT, ""),
            DataPoint(day(2), 10, 4, 5, EventType.SNAPSHOT, ""),
        ]
        stats = reconstructor.compute_usage_stats(points)
        assert stats.average_daily_usage == 2
        assert stats.projected_days_remaining == 3


def test_report_to_dict_serializes_dates_and_tags():
    report = reconstructor.reconstruct(
        shipments=[Shipment(D1, 50, "Glucose - LOT101 @ Lab A")],
    )
    data = report.to_dict()
    assert data["data_points"] == [
        {
            "date": "2024-01-01",
            "cumulative_received": 50,
            "cumulative_used": 0,
            "current_inventory": 50,
            "event_type": "shipment",
            "event_details": "Glucose - LOT101 @ Lab A",
        }
    ]
    assert data["stats"]["days_of_data"] == 1
