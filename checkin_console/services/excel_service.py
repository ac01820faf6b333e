"""
Excel processing service for guest list import/export
"""

import io
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from checkin_console.core.errors import ApiError
from checkin_console.schemas.event import Event
from checkin_console.schemas.guest import Guest, GuestCreate
from checkin_console.schemas.options import GuestCustomData
from checkin_console.services.queries import ConsoleQueries

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# normalized header -> field
COLUMN_ALIASES = {
    "name": "name",
    "guestname": "name",
    "email": "email",
    "phone": "phone",
    "phonenumber": "phone",
    "hotel": "hotel",
    "room": "room",
    "checkindate": "check_in_date",
    "checkoutdate": "check_out_date",
}

def _normalize_header(column: Any) -> str:
    return re.sub(r"[^a-z]", "", str(column).lower())

def _cell(row: pd.Series, column: Optional[str]) -> Optional[str]:
    """Cell text, or None for blanks"""
    if column is None:
        return None
    value = row[column]
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if hasattr(value, "strftime"):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None

class ExcelService:
    """Service for handling Excel operations"""

    REQUIRED_COLUMNS = ['name']
    COLUMNS = ['Name', 'Email', 'Phone', 'Hotel', 'Room', 'Check-In Date', 'Check-Out Date']

    @staticmethod
    def create_template() -> bytes:
        """Create Excel template with the importable columns"""
        df = pd.DataFrame(columns=ExcelService.COLUMNS)

        # Add sample data for guidance
        sample_data = [
            ['Sample Guest 1', 'guest1@example.com', '+1234567890', 'Hotel A', '101', '2025-01-15', '2025-01-17'],
            ['Sample Guest 2', 'guest2@example.com', '', 'Hotel A', '102', '2025-01-15', ''],
            ['Sample Guest 3', '', '', '', '', '', ''],
        ]

        for row in sample_data:
            df.loc[len(df)] = row

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Guest List')

        return buffer.getvalue()

    @staticmethod
    def column_mapping(df: pd.DataFrame) -> Dict[str, str]:
        """Map known fields to the sheet's actual column names"""
        mapping = {}
        for col in df.columns:
            field = COLUMN_ALIASES.get(_normalize_header(col))
            if field and field not in mapping:
                mapping[field] = col
        return mapping

    @staticmethod
    def validate_excel_structure(df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate Excel file structure"""
        errors = []

        mapping = ExcelService.column_mapping(df)
        missing_columns = [col for col in ExcelService.REQUIRED_COLUMNS if col not in mapping]

        if missing_columns:
            errors.append(f"Missing required columns: {', '.join(missing_columns)}")

        return len(errors) == 0, errors

    @staticmethod
    def validate_data_constraints(df: pd.DataFrame, event: Optional[Event] = None) -> Tuple[bool, List[str]]:
        """Validate rows against the event's hotels/rooms and for duplicate emails"""
        errors = []
        mapping = ExcelService.column_mapping(df)

        hotels = event.options.hotels if event else []
        rooms = event.options.rooms if event else []
        seen_emails: Dict[str, int] = {}

        for index, row in df.iterrows():
            row_no = index + 2  # header is row 1
            if _cell(row, mapping.get('name')) is None:
                continue

            hotel = _cell(row, mapping.get('hotel'))
            if hotel and hotels and hotel not in hotels:
                errors.append(f"Row {row_no}: hotel '{hotel}' is not offered by this event")

            room = _cell(row, mapping.get('room'))
            if room and rooms and room not in rooms:
                errors.append(f"Row {row_no}: room '{room}' is not offered by this event")

            email = _cell(row, mapping.get('email'))
            if email:
                key = email.lower()
                if key in seen_emails:
                    errors.append(f"Row {row_no}: duplicate email '{email}' (first seen on row {seen_emails[key]})")
                else:
                    seen_emails[key] = row_no

        return len(errors) == 0, errors

    @staticmethod
    def parse_guest_rows(
        file_content: bytes,
        event: Event
    ) -> Tuple[bool, List[str], List[GuestCreate]]:
        """Read and validate a workbook into guest-create payloads"""
        try:
            df = pd.read_excel(io.BytesIO(file_content))
        except Exception as e:
            return False, [f"Error reading Excel file: {str(e)}"], []

        valid_structure, structure_errors = ExcelService.validate_excel_structure(df)
        if not valid_structure:
            return False, structure_errors, []

        valid_data, data_errors = ExcelService.validate_data_constraints(df, event)
        if not valid_data:
            return False, data_errors, []

        mapping = ExcelService.column_mapping(df)
        payloads = []
        for _, row in df.iterrows():
            name = _cell(row, mapping['name'])
            # Skip empty rows
            if name is None:
                continue

            custom = {}
            for field, key in (
                ('hotel', 'Hotel'),
                ('room', 'Room'),
                ('check_in_date', 'CheckInDate'),
                ('check_out_date', 'CheckOutDate'),
            ):
                value = _cell(row, mapping.get(field))
                if value is not None:
                    custom[key] = value

            payloads.append(GuestCreate(
                event_id=event.id,
                name=name,
                email=_cell(row, mapping.get('email')),
                phone=_cell(row, mapping.get('phone')),
                custom_data=GuestCustomData.model_validate(custom),
            ))

        return True, [], payloads

    @staticmethod
    async def import_guests(
        queries: ConsoleQueries,
        event: Event,
        file_content: bytes
    ) -> Tuple[bool, List[str], int]:
        """Create one guest per valid row; backend rejections are reported per row"""
        ok, errors, payloads = ExcelService.parse_guest_rows(file_content, event)
        if not ok:
            return False, errors, 0

        processed_count = 0
        for payload in payloads:
            try:
                await queries.create_guest(event.id, payload)
            except ApiError as e:
                errors.append(f"Guest '{payload.name}': {e.message}")
                continue
            processed_count += 1

        logger.info(f"Imported {processed_count} of {len(payloads)} guests into event {event.id}")
        return len(errors) == 0, errors, processed_count

    @staticmethod
    def export_guests(guests: List[Guest], include_checkin: bool = True) -> bytes:
        """Export guests with their assignment and derived status"""
        data = []
        for guest in guests:
            custom = guest.custom_data
            row = {
                'Name': guest.name,
                'Email': guest.email or '',
                'Phone': guest.phone or '',
                'Hotel': custom.hotel or '',
                'Room': custom.room or '',
                'Check-In Date': custom.check_in_date or '',
                'Check-Out Date': custom.check_out_date or '',
            }
            if include_checkin:
                row['Status'] = guest.status.value
                row['Checked In At'] = custom.checked_in_at or ''
                row['Checked Out At'] = custom.checked_out_at or ''

            data.append(row)

        columns = ExcelService.COLUMNS + (['Status', 'Checked In At', 'Checked Out At'] if include_checkin else [])
        df = pd.DataFrame(data, columns=columns)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Guest List')

        return buffer.getvalue()
