"""Output generation for calendars and timesheets (text, CSV, PDF)."""

from careshift.output.pdf_generator import PDFGenerator
from careshift.output.text_generator import TextCalendarGenerator
from careshift.output.timesheet import Timesheet, TimesheetWeek, build_timesheet, timesheet_to_csv

__all__ = [
    "PDFGenerator",
    "TextCalendarGenerator",
    "Timesheet",
    "TimesheetWeek",
    "build_timesheet",
    "timesheet_to_csv",
]
