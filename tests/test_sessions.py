import pytest

from pallet_reports.normalizer import normalize
from pallet_reports.schemas import Session
from pallet_reports.sessions import classify_session, parse_session


@pytest.mark.parametrize(
    "temperature, expected",
    [
        (0, Session.FROZEN),
        (-18, Session.FROZEN),
        (0.5, Session.REFRIGERATED),
        (10, Session.REFRIGERATED),
        (10.0001, Session.DRY),
        (25, Session.DRY),
        ("", Session.FROZEN),
        ("   ", Session.FROZEN),
        (None, Session.FROZEN),
        ("abc", Session.UNCLASSIFIABLE),
        ("4", Session.REFRIGERATED),
        (" -2.5 ", Session.FROZEN),
    ],
)
def test_classify_session(temperature, expected):
    assert classify_session(temperature) is expected


def test_not_a_number_is_unclassifiable():
    assert classify_session(float("nan")) is Session.UNCLASSIFIABLE


@pytest.mark.parametrize(
    "value, expected",
    [
        ("co", Session.FROZEN),
        (" RE ", Session.REFRIGERATED),
        (Session.DRY, Session.DRY),
        ("", None),
        (None, None),
        ("TODAS", None),
    ],
)
def test_parse_session(value, expected):
    assert parse_session(value) is expected


@pytest.mark.parametrize("reading", [[1, 2], (3,), {"value": 3}])
def test_non_scalar_reading_is_unclassifiable(reading):
    assert classify_session(reading) is Session.UNCLASSIFIABLE


def test_non_scalar_reading_does_not_abort_normalize(make_record):
    record = make_record(items=[{"pallet_id": 1, "net_weight": 10, "temperature": [1, 2]}])
    assert normalize(record) == (1, 10)
    assert normalize(record, Session.FROZEN) == (0, 0)
