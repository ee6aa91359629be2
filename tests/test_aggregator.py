from datetime import date

from pallet_reports.aggregator import aggregate, aggregate_by_session, movements_for_client
from pallet_reports.schemas import DateRange, OperationKind, Session

from conftest import COLD, FROZEN


def test_daily_totals_per_client(make_record, pallets, january):
    records = [
        make_record(day=date(2024, 1, 2), items=pallets(1, 2, 3), id="r1"),
        make_record(day=date(2024, 1, 2), items=pallets(4), id="r2"),
        make_record(kind=OperationKind.DISPATCH, day=date(2024, 1, 2), items=pallets(1), id="d1"),
        make_record(day=date(2024, 1, 3), client="BETA", items=pallets(1), id="r3"),
    ]
    movements = aggregate(records, january)

    assert set(movements) == {(date(2024, 1, 2), "ACME"), (date(2024, 1, 3), "BETA")}
    acme = movements[(date(2024, 1, 2), "ACME")]
    assert acme.pallets_received == 4
    assert acme.pallets_dispatched == 1
    assert acme.net_weight_received == 400
    assert acme.net_weight_dispatched == 100


def test_records_outside_range_are_dropped(make_record, pallets, january):
    records = [
        make_record(day=date(2023, 12, 31), items=pallets(1)),
        make_record(day=date(2024, 1, 6), items=pallets(1)),
    ]
    assert aggregate(records, january) == {}


def test_empty_range_yields_nothing(make_record, pallets):
    backwards = DateRange(start=date(2024, 1, 5), end=date(2024, 1, 1))
    assert aggregate([make_record(day=date(2024, 1, 3), items=pallets(1))], backwards) == {}


def test_processing_output_counts_as_dispatched(make_record, pallets, january):
    record = make_record(
        items=pallets(1, 2),
        order_type="MAQUILA",
        processed_output={Session.FROZEN: 3, Session.DRY: 1},
    )
    movement = aggregate([record], january)[(date(2024, 1, 1), "ACME")]
    assert movement.pallets_received == 2
    assert movement.pallets_dispatched == 4

    frozen = aggregate([record], january, Session.FROZEN)[(date(2024, 1, 1), "ACME")]
    assert frozen.pallets_dispatched == 3
    assert frozen.session is Session.FROZEN


def test_aggregate_by_session_splits_one_record(make_record, pallets, january):
    record = make_record(items=pallets(1, temperature=FROZEN) + pallets(2, 3, temperature=COLD))
    by_session = aggregate_by_session([record], january)

    key = (date(2024, 1, 1), "ACME")
    assert by_session[Session.FROZEN][key].pallets_received == 1
    assert by_session[Session.REFRIGERATED][key].pallets_received == 2
    assert by_session[Session.DRY][key].pallets_received == 0


def test_movements_for_client_merges_name_variants(make_record, pallets, january):
    records = [
        make_record(client="Acme", items=pallets(1), id="a"),
        make_record(client="ACME ", items=pallets(2, 3), id="b"),
        make_record(client="BETA", items=pallets(9), id="c"),
    ]
    by_date = movements_for_client(aggregate(records, january), " acme")

    assert list(by_date) == [date(2024, 1, 1)]
    assert by_date[date(2024, 1, 1)].pallets_received == 3
