import math

import pytest

from jumpmap.catalog import Catalog, SecurityClass, decode_records, parse_record
from jumpmap.errors import DuplicateEntityError, ParseError


def test_sources_and_sinks_are_split_by_rating_and_security(record_factory) -> None:
    records = [
        record_factory("Station", security_class="low", rating=3),
        record_factory("Weak", security_class="low", rating=2),
        record_factory("Target", security_class="null", rating=0),
        record_factory("Both", security_class="null", rating=4),
        record_factory("Neither", security_class="high", rating=1),
    ]

    catalog = Catalog.load(records)

    assert len(catalog) == 5
    assert {system.name for system in catalog.sources} == {"Station", "Both"}
    assert {system.name for system in catalog.sinks} == {"Target", "Both"}


def test_rating_threshold_is_strictly_greater(record_factory) -> None:
    records = [
        record_factory("A", security_class="low", rating=4),
        record_factory("B", security_class="low", rating=5),
    ]

    catalog = Catalog.load(records, rating_threshold=4)

    assert {system.name for system in catalog.sources} == {"B"}


def test_duplicate_name_aborts_load(record_factory) -> None:
    records = [record_factory("Dup"), record_factory("Other"), record_factory("Dup", x=5.0)]

    with pytest.raises(DuplicateEntityError) as exc:
        Catalog.load(records)

    assert "Dup" in str(exc.value)
    assert exc.value.context == {"name": "Dup"}


def test_blank_lines_are_skipped_and_text_records_decoded() -> None:
    lines = [
        "",
        "   ",
        '{"name": "A", "x": "1.5e+16", "y": 0, "z": 0, "securityClass": "null", "stationRating": 0}',
        "\t",
    ]

    catalog = Catalog.load(lines)

    (system,) = catalog.systems
    assert system.name == "A"
    assert system.x == pytest.approx(1.5e16)
    assert system.security_class is SecurityClass.NULL


def test_invalid_json_line_reports_line_number() -> None:
    with pytest.raises(ParseError) as exc:
        list(decode_records(["", "{not json"]))

    assert "line 2" in str(exc.value)


@pytest.mark.parametrize(
    "field, value",
    [
        ("x", "abc"),
        ("y", None),
        ("z", float("nan")),
        ("x", True),
        ("z", math.inf),
        ("x", 10**400),
    ],
)
def test_bad_coordinates_raise_parse_error(record_factory, field, value) -> None:
    record = record_factory("Bad")
    record[field] = value

    with pytest.raises(ParseError):
        parse_record(record)


@pytest.mark.parametrize("rating", [-1, 2.5, "three", None, True, "\u00b3", "++5", math.inf])
def test_bad_rating_raises_parse_error(record_factory, rating) -> None:
    record = record_factory("Bad")
    record["stationRating"] = rating

    with pytest.raises(ParseError):
        parse_record(record)


def test_missing_name_raises_parse_error(record_factory) -> None:
    record = record_factory("Named")
    del record["name"]

    with pytest.raises(ParseError):
        parse_record(record)


def test_unknown_security_class_raises_parse_error(record_factory) -> None:
    with pytest.raises(ParseError):
        parse_record(record_factory("Odd", security_class="medium"))


def test_security_class_derived_from_security_status(record_factory) -> None:
    base = record_factory("S")
    del base["securityClass"]

    high = parse_record({**base, "security": 0.5})
    low = parse_record({**base, "security": 0.1})
    null = parse_record({**base, "security": -0.2})

    assert high.security_class is SecurityClass.HIGH
    assert low.security_class is SecurityClass.LOW
    assert null.security_class is SecurityClass.NULL
    assert null.security == pytest.approx(-0.2)


def test_missing_security_class_without_status_fails(record_factory) -> None:
    record = record_factory("S")
    del record["securityClass"]

    with pytest.raises(ParseError):
        parse_record(record)


def test_region_is_optional(record_factory) -> None:
    system = parse_record(record_factory("NoRegion", region=None))

    assert system.region is None


def test_systems_compare_by_name(record_factory) -> None:
    first = parse_record(record_factory("Same", x=1.0))
    second = parse_record(record_factory("Same", x=2.0))

    assert first == second
    assert len({first, second}) == 1


def test_sink_security_class_is_configurable(record_factory) -> None:
    records = [
        record_factory("Low", security_class="low"),
        record_factory("Null", security_class="null"),
    ]

    catalog = Catalog.load(records, sink_security_class="low")

    assert {system.name for system in catalog.sinks} == {"Low"}
