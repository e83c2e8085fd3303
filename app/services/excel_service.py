"""
Excel export of event attendance rosters
"""

import io
from typing import List

import pandas as pd

from app.models import AttendanceRecord, Event

class ExcelService:
    """Service for handling Excel operations"""

    COLUMNS = ['Name', 'Email', 'College', 'Registered At', 'Attended', 'Attended At']

    @staticmethod
    def build_roster_frame(records: List[AttendanceRecord]) -> pd.DataFrame:
        """One row per attendee, in registration order"""
        data = []
        for record in records:
            user = record.user
            data.append({
                'Name': user.name if user else '',
                'Email': user.email if user else '',
                'College': record.registered_college or '',
                'Registered At': record.registered_at.isoformat() if record.registered_at else '',
                'Attended': 'Yes' if record.is_attended else 'No',
                'Attended At': record.attended_at.isoformat() if record.attended_at else '',
            })

        return pd.DataFrame(data, columns=ExcelService.COLUMNS)

    @staticmethod
    def export_attendance(event: Event, records: List[AttendanceRecord]) -> bytes:
        """Export the attendance roster plus a summary sheet to Excel"""
        df = ExcelService.build_roster_frame(records)

        attended = int((df['Attended'] == 'Yes').sum()) if not df.empty else 0
        summary = pd.DataFrame([
            {'Field': 'Event', 'Value': event.title},
            {'Field': 'Category', 'Value': event.category},
            {'Field': 'Date', 'Value': event.date or ''},
            {'Field': 'Venue', 'Value': event.venue or ''},
            {'Field': 'Registered', 'Value': len(df)},
            {'Field': 'Attended', 'Value': attended},
        ])

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Attendance')
            summary.to_excel(writer, index=False, sheet_name='Summary')

        return buffer.getvalue()
