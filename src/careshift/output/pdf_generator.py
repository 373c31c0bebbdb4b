"""PDF generation for calendars and timesheets.

This module creates printable PDFs showing:
- A week calendar with one column per day and entries colored by kind
- Weekly timesheets with hours per kind and totals
"""

from io import BytesIO
from pathlib import Path
from typing import Union

from careshift.domain.models import CalendarEntry, DateRange, ShiftKind
from careshift.output.timesheet import TIMESHEET_COLUMNS, Timesheet

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    ShiftKind.BASIC: (0.23, 0.51, 0.96),  # Blue
    ShiftKind.COVER: (0.02, 0.71, 0.83),  # Cyan
    ShiftKind.SICKNESS: (0.94, 0.27, 0.27),  # Red
    ShiftKind.ANNUAL_LEAVE: (0.92, 0.70, 0.03),  # Yellow
    ShiftKind.PUBLIC_HOLIDAY: (0.66, 0.33, 0.97),  # Purple
    ShiftKind.TRAINING: (0.13, 0.77, 0.37),  # Green
    ShiftKind.OTHER: (0.98, 0.45, 0.09),  # Orange
    "empty": (0.95, 0.95, 0.95),  # Light gray
}


def _load_canvas():
    try:
        from reportlab.lib.pagesizes import landscape, letter
        from reportlab.pdfgen import canvas
    except ImportError:
        raise ImportError(
            "reportlab is required for PDF generation. "
            "Install with: pip install reportlab"
        )
    return canvas, landscape(letter)


class PDFGenerator:
    """Generates printable calendar and timesheet PDFs.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate_calendar(entries, window, "week.pdf", title="Smith Family")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate_calendar(
        self,
        entries: list[CalendarEntry],
        date_range: DateRange,
        output_path: Union[str, Path],
        title: str = "",
    ) -> None:
        """Render a calendar window and save it to a file."""
        canvas, pagesize = _load_canvas()
        c = canvas.Canvas(str(output_path), pagesize=pagesize)
        self._draw_calendar_pages(c, entries, date_range, title)
        c.save()

    def generate_calendar_to_buffer(
        self,
        entries: list[CalendarEntry],
        date_range: DateRange,
        title: str = "",
    ) -> BytesIO:
        """Render a calendar window and return the PDF as a bytes buffer."""
        canvas, pagesize = _load_canvas()
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=pagesize)
        self._draw_calendar_pages(c, entries, date_range, title)
        c.save()
        buffer.seek(0)
        return buffer

    def generate_timesheet(
        self,
        timesheet: Timesheet,
        output_path: Union[str, Path],
    ) -> None:
        """Render a timesheet and save it to a file."""
        canvas, pagesize = _load_canvas()
        c = canvas.Canvas(str(output_path), pagesize=pagesize)
        self._draw_timesheet_page(c, timesheet)
        c.save()

    def generate_timesheet_to_buffer(self, timesheet: Timesheet) -> BytesIO:
        """Render a timesheet and return the PDF as a bytes buffer."""
        canvas, pagesize = _load_canvas()
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=pagesize)
        self._draw_timesheet_page(c, timesheet)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw_calendar_pages(
        self,
        c,
        entries: list[CalendarEntry],
        date_range: DateRange,
        title: str,
    ) -> None:
        """Draw the window seven days per page."""
        days = date_range.dates()
        total_pages = (len(days) + 6) // 7

        for page_index in range(total_pages):
            page_days = days[page_index * 7:(page_index + 1) * 7]
            self._draw_header(c, page_days, title)
            self._draw_day_columns(c, entries, page_days)
            self._draw_legend(c, self.margin, self.margin + 10)

            c.setFont("Helvetica", 9)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 10,
                f"Page {page_index + 1} of {total_pages}",
            )
            c.showPage()

    def _draw_header(self, c, page_days: list, title: str) -> None:
        """Draw page header with title and date span."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        heading = "Care Calendar"
        if title:
            heading += f" - {title}"
        c.drawString(self.margin, self.page_height - self.margin - 20, heading)

        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"{page_days[0].strftime('%d %b %Y')} to {page_days[-1].strftime('%d %b %Y')}",
        )

    def _draw_day_columns(self, c, entries: list[CalendarEntry], page_days: list) -> None:
        """Draw one column per day with an entry box per calendar entry."""
        top = self.page_height - self.margin - 60
        bottom = self.margin + 40
        column_width = (self.page_width - 2 * self.margin) / 7
        box_height = 28

        by_day: dict = {}
        for entry in entries:
            by_day.setdefault(entry.entry_date, []).append(entry)

        for i, day in enumerate(page_days):
            x = self.margin + i * column_width

            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica-Bold", 9)
            c.drawString(x + 4, top, day.strftime("%a %d %b"))

            c.setStrokeColorRGB(0.7, 0.7, 0.7)
            c.setLineWidth(0.5)
            c.rect(x, bottom, column_width, top - bottom - 6, fill=0, stroke=1)

            y = top - 10 - box_height
            day_entries = by_day.get(day, [])
            max_boxes = int((top - bottom - 16) // (box_height + 4))

            for entry in day_entries[:max_boxes]:
                c.setFillColorRGB(*COLORS.get(entry.kind, COLORS["empty"]))
                c.rect(x + 3, y, column_width - 6, box_height, fill=1, stroke=0)

                c.setFillColorRGB(1, 1, 1)
                c.setFont("Helvetica-Bold", 7)
                c.drawString(
                    x + 6,
                    y + box_height - 10,
                    f"{entry.start_time.strftime('%H:%M')}-{entry.end_time.strftime('%H:%M')}",
                )
                c.setFont("Helvetica", 7)
                c.drawString(x + 6, y + 5, entry.label[:22])
                y -= box_height + 4

            hidden = len(day_entries) - max_boxes
            if hidden > 0:
                c.setFillColorRGB(0, 0, 0)
                c.setFont("Helvetica-Oblique", 7)
                c.drawString(x + 6, y + box_height - 10, f"+{hidden} more")

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        c.setFont("Helvetica", 7)
        current_x = x + 45

        for kind in ShiftKind:
            c.setFillColorRGB(*COLORS[kind])
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, kind.label)
            current_x += 85

    def _draw_timesheet_page(self, c, timesheet: Timesheet) -> None:
        """Draw a timesheet table: one row per week, one column per kind."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(self.margin, self.page_height - self.margin - 20, "Timesheet")

        y = self.page_height - self.margin - 45
        c.setFont("Helvetica", 10)
        for line in (
            f"Employee: {timesheet.carer_name}",
            f"Employer: {timesheet.network_name}",
            f"Period ending: {timesheet.period_ending.strftime('%d %B %Y')}",
        ):
            c.drawString(self.margin, y, line)
            y -= 15

        headers = ["Week ending"] + [kind.label for kind in TIMESHEET_COLUMNS] + ["Total"]
        column_width = (self.page_width - 2 * self.margin) / len(headers)
        row_height = 20
        y -= 20

        rows = [
            [week.week_ending.strftime("%d/%m/%Y")]
            + [f"{week.hours[kind]:.2f}" for kind in TIMESHEET_COLUMNS]
            + [f"{week.total_hours:.2f}"]
            for week in timesheet.weeks
        ]
        totals = timesheet.totals
        rows.append(
            ["Total"]
            + [f"{totals[kind]:.2f}" for kind in TIMESHEET_COLUMNS]
            + [f"{timesheet.total_hours:.2f}"]
        )

        self._draw_table_row(c, headers, y, column_width, row_height, bold=True)
        for i, row in enumerate(rows):
            y -= row_height
            self._draw_table_row(
                c, row, y, column_width, row_height, bold=(i == len(rows) - 1)
            )

        c.showPage()

    def _draw_table_row(
        self,
        c,
        cells: list[str],
        y: float,
        column_width: float,
        row_height: float,
        bold: bool = False,
    ) -> None:
        c.setStrokeColorRGB(0, 0, 0)
        c.setLineWidth(0.5)
        c.setFont("Helvetica-Bold" if bold else "Helvetica", 9)
        for i, cell in enumerate(cells):
            x = self.margin + i * column_width
            c.setFillColorRGB(0, 0, 0)
            c.rect(x, y, column_width, row_height, fill=0, stroke=1)
            c.drawCentredString(x + column_width / 2, y + 6, cell)
