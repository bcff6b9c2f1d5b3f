from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

import pandas as pd
from openpyxl.styles import Font

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import to_db_datetime
from ..core.constants import EXPORT_COLUMNS, EXPORT_SHEET_NAME, MSG_SESSION_NOT_FOUND
from ..core.exceptions import NotFoundError
from ..sessions.repository import SessionRepository

logger = logging.getLogger(__name__)

RollNo = Union[int, str]


def roll_no_cell(roll_no: str) -> RollNo:
    """Render a roll number as a number when it is a plain integer, else as text.

    Presentation only: the stored roll number stays a string.
    """
    text = roll_no.strip()
    digits = text[1:] if text[:1] in ("-", "+") else text
    if digits.isascii() and digits.isdigit():
        return int(text)
    return roll_no


@dataclass(frozen=True)
class ExportSheet:
    session_id: int
    header: list[tuple[str, str]]
    rows: list[tuple[str, RollNo, datetime]] = field(default_factory=list)

    @property
    def filename(self) -> str:
        return f"attendance-{self.session_id}.xlsx"


class AttendanceExportService:
    def __init__(self, sessions: SessionRepository, attendance: AttendanceRepository):
        self._sessions = sessions
        self._attendance = attendance

    def build_sheet(self, session_id: int | str) -> ExportSheet:
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError(MSG_SESSION_NOT_FOUND)

        entries = self._attendance.list_for_session(session.session_id)
        return ExportSheet(
            session_id=session.session_id,
            header=[
                ("Subject", session.subject),
                ("Section", session.section),
                ("Course", session.course),
            ],
            rows=[(e.name, roll_no_cell(e.roll_no), to_db_datetime(e.timestamp)) for e in entries],
        )

    def render_xlsx(self, sheet: ExportSheet) -> bytes:
        frame = pd.DataFrame(sheet.rows, columns=list(EXPORT_COLUMNS))

        out = io.BytesIO()
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            # Column header lands right after the header block and one blank row.
            frame.to_excel(writer, index=False, sheet_name=EXPORT_SHEET_NAME, startrow=len(sheet.header) + 1)
            ws = writer.sheets[EXPORT_SHEET_NAME]
            for row_idx, (label, value) in enumerate(sheet.header, start=1):
                ws.cell(row=row_idx, column=1, value=label).font = Font(bold=True)
                ws.cell(row=row_idx, column=2, value=value)
            ws.column_dimensions["A"].width = 28
            ws.column_dimensions["C"].width = 22

        logger.info("Exported %d rows for session %s", len(sheet.rows), sheet.session_id)
        return out.getvalue()

    def export_xlsx(self, session_id: int | str) -> tuple[bytes, str]:
        sheet = self.build_sheet(session_id)
        return self.render_xlsx(sheet), sheet.filename
