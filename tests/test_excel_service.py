"""
Tests for Excel template, import and export
"""

import asyncio
import io
import json

import httpx
import pandas as pd

from checkin_console.schemas.event import Event
from checkin_console.schemas.guest import Guest
from checkin_console.services.excel_service import ExcelService

from conftest import event_record, guest_record


def workbook(rows, columns):
    buffer = io.BytesIO()
    pd.DataFrame(rows, columns=columns).to_excel(buffer, index=False)
    return buffer.getvalue()


def make_event(hotels=("Hotel A",), rooms=("101", "102")):
    return Event.model_validate(event_record(1, "Summit", hotels=hotels, rooms=rooms))


def test_template_has_importable_columns():
    df = pd.read_excel(io.BytesIO(ExcelService.create_template()))

    assert list(df.columns) == ExcelService.COLUMNS
    assert len(df) == 3
    assert ExcelService.validate_excel_structure(df) == (True, [])


def test_template_rows_parse_for_matching_event():
    ok, errors, payloads = ExcelService.parse_guest_rows(ExcelService.create_template(), make_event())

    assert ok, errors
    assert [p.name for p in payloads] == ["Sample Guest 1", "Sample Guest 2", "Sample Guest 3"]
    first = payloads[0]
    assert first.email == "guest1@example.com"
    assert first.custom_data.to_dict() == {
        "Hotel": "Hotel A", "Room": "101", "CheckInDate": "2025-01-15", "CheckOutDate": "2025-01-17",
    }
    assert payloads[2].custom_data.to_dict() == {}


def test_missing_name_column_is_reported():
    content = workbook([["a@example.com"]], ["Email"])

    ok, errors, payloads = ExcelService.parse_guest_rows(content, make_event())

    assert not ok
    assert errors == ["Missing required columns: name"]
    assert payloads == []


def test_header_spelling_is_forgiving():
    df = pd.DataFrame(columns=["Guest Name", "E-mail", "Phone Number", "check_in_date"])

    assert ExcelService.column_mapping(df) == {
        "name": "Guest Name",
        "email": "E-mail",
        "phone": "Phone Number",
        "check_in_date": "check_in_date",
    }


def test_unknown_hotel_room_and_duplicate_email_are_rejected():
    df = pd.DataFrame(
        [
            ["Ann", "ann@example.com", "Hotel A", "101"],
            ["Bo", "ANN@example.com", "Hotel Z", "101"],
            ["Cy", "cy@example.com", "Hotel A", "999"],
            [None, "ignored@example.com", "Hotel Z", "1"],
        ],
        columns=["Name", "Email", "Hotel", "Room"],
    )

    ok, errors = ExcelService.validate_data_constraints(df, make_event())

    assert not ok
    assert errors == [
        "Row 3: hotel 'Hotel Z' is not offered by this event",
        "Row 3: duplicate email 'ANN@example.com' (first seen on row 2)",
        "Row 4: room '999' is not offered by this event",
    ]


def test_numeric_rooms_are_read_as_text():
    content = workbook([["Ann", 101], ["Bo", 102]], ["Name", "Room"])

    ok, errors, payloads = ExcelService.parse_guest_rows(content, make_event())

    assert ok, errors
    assert [p.custom_data.room for p in payloads] == ["101", "102"]


def test_unreadable_file_is_reported():
    ok, errors, payloads = ExcelService.parse_guest_rows(b"not a workbook", make_event())

    assert not ok
    assert errors[0].startswith("Error reading Excel file")


def test_import_creates_one_guest_per_row(backend, queries):
    counter = iter(range(100, 200))

    def create(request):
        sent = json.loads(request.content)
        if sent["guestName"] == "Bo":
            return httpx.Response(422, json={"Message": "email already registered"})
        return httpx.Response(201, json={"Data": guest_record(next(counter), sent["guestName"])})

    backend.add("POST", "/1/events/1/guests", handler=create)
    content = workbook(
        [["Ann", "ann@example.com", "Hotel A", "101"], ["Bo", "bo@example.com", "", ""], ["Cy", "", "", ""]],
        ["Name", "Email", "Hotel", "Room"],
    )

    ok, errors, processed = asyncio.run(ExcelService.import_guests(queries, make_event(), content))

    assert not ok
    assert processed == 2
    assert errors == ["Guest 'Bo': email already registered"]

    first = backend.body(backend.calls("POST", "/1/events/1/guests")[0])
    assert first["eventID"] == 1
    assert json.loads(first["customData"]) == {"Hotel": "Hotel A", "Room": "101"}


def test_import_stops_before_sending_when_rows_are_invalid(backend, queries):
    content = workbook([["Ann", "Hotel Z"]], ["Name", "Hotel"])

    ok, errors, processed = asyncio.run(ExcelService.import_guests(queries, make_event(), content))

    assert not ok
    assert processed == 0
    assert backend.requests == []


def test_export_includes_status_columns():
    guests = [
        Guest.model_validate(guest_record(1, "Ann Lee", Hotel="Hotel A", Room="101",
                                          CheckedInAt="2025-01-15T09:30:00.000Z")),
        Guest.model_validate(guest_record(2, "Bo Chan")),
    ]

    df = pd.read_excel(io.BytesIO(ExcelService.export_guests(guests)), dtype=str, keep_default_na=False)

    assert list(df.columns) == ExcelService.COLUMNS + ["Status", "Checked In At", "Checked Out At"]
    assert list(df["Name"]) == ["Ann Lee", "Bo Chan"]
    assert list(df["Status"]) == ["checked_in", "not_assigned"]
    assert df.loc[0, "Checked In At"] == "2025-01-15T09:30:00.000Z"
    assert df.loc[1, "Hotel"] == ""


def test_export_without_checkin_columns():
    df = pd.read_excel(io.BytesIO(ExcelService.export_guests([], include_checkin=False)))

    assert list(df.columns) == ExcelService.COLUMNS
