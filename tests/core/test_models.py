# tests/core/test_models.py

import datetime

import pytest

from tw_nhi_icc.core.models import CardRecord, Sex, VersionInfo, from_epoch_millis, map_card_list

WIRE_CARD = {
    "reader_name": "Generic EMV Smartcard Reader 0",
    "card_no": "000012345678",
    "full_name": "王小明",
    "id_no": "A123456789",
    "birth_date": "1990-01-02",
    "birth_date_timestamp": 631238400000,
    "sex": "M",
    "issue_date": "2015-06-01",
    "issue_date_timestamp": 1433116800000,
}


def test_card_record_from_wire_renames_every_field():
    card = CardRecord.from_wire(WIRE_CARD)

    assert card.reader_name == WIRE_CARD["reader_name"]
    assert card.card_no == WIRE_CARD["card_no"]
    assert card.full_name == WIRE_CARD["full_name"]
    assert card.id_no == WIRE_CARD["id_no"]
    assert card.sex is Sex.M
    assert card.birthday == datetime.datetime(1990, 1, 2, tzinfo=datetime.timezone.utc)
    assert card.issue_date == datetime.datetime(2015, 6, 1, tzinfo=datetime.timezone.utc)


def test_timestamps_are_exact_epoch_milliseconds():
    wire = dict(WIRE_CARD, birth_date_timestamp=631238400123, issue_date_timestamp=-86400000)
    card = CardRecord.from_wire(wire)

    epoch = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
    assert card.birthday == epoch + datetime.timedelta(milliseconds=631238400123)
    assert card.issue_date == epoch - datetime.timedelta(days=1)
    assert card.birthday.tzinfo is datetime.timezone.utc


def test_from_epoch_millis_zero():
    assert from_epoch_millis(0) == datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


def test_card_record_is_immutable():
    card = CardRecord.from_wire(WIRE_CARD)
    with pytest.raises(AttributeError):
        card.full_name = "someone else"


def test_invalid_sex_raises():
    with pytest.raises(ValueError):
        CardRecord.from_wire(dict(WIRE_CARD, sex="X"))


def test_missing_field_raises():
    wire = dict(WIRE_CARD)
    del wire["id_no"]
    with pytest.raises(KeyError):
        CardRecord.from_wire(wire)


def test_map_card_list_keeps_order():
    wire = [
        dict(WIRE_CARD, reader_name="Reader B", sex="F"),
        dict(WIRE_CARD, reader_name="Reader A"),
        dict(WIRE_CARD, reader_name="Reader C"),
    ]
    cards = map_card_list(wire)
    assert [c.reader_name for c in cards] == ["Reader B", "Reader A", "Reader C"]
    assert cards[0].sex is Sex.F


def test_map_card_list_empty():
    assert map_card_list([]) == []


def test_map_card_list_rejects_non_list():
    with pytest.raises(TypeError):
        map_card_list({"reader_name": "x"})


def test_sex_str():
    assert str(Sex.F) == "F"
    assert Sex("M") is Sex.M


def test_version_info_passthrough():
    version = VersionInfo.from_wire({"major": 1, "minor": 2, "patch": 3, "pre": "beta", "text": "1.2.3-beta"})
    assert version == VersionInfo(major=1, minor=2, patch=3, pre="beta", text="1.2.3-beta")


def test_version_info_does_not_validate():
    version = VersionInfo.from_wire({"text": "weird", "extra": True})
    assert version.text == "weird"
    assert version.major is None


def test_timestamps_before_1970():
    card = CardRecord.from_wire(dict(WIRE_CARD, birth_date_timestamp=-1262304000000))
    assert card.birthday == datetime.datetime(1930, 1, 1, tzinfo=datetime.timezone.utc)


@pytest.mark.parametrize("timestamp", [1e20, -1e20, 253402300800000])
def test_out_of_range_timestamp_raises_overflow(timestamp):
    with pytest.raises(OverflowError):
        map_card_list([dict(WIRE_CARD, birth_date_timestamp=timestamp)])
