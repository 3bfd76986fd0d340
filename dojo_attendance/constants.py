APP_NAME = "Kickboxing Attendance"
CLUB_NAME = "Masaru Team"
EXPORT_BRAND = "Masaru"

DEFAULT_FEE = 60
ABSENCE_PENALTY = 10
SESSIONS_PER_PERIOD = 6
ABSENCE_MARKER = "ABS"
DATE_FORMAT = "%Y-%m-%d"

PROGRAM_STORAGE = "data"
STATE_FILE = f"{PROGRAM_STORAGE}/attendance.json"
LEGACY_STUDENTS_FILE = f"{PROGRAM_STORAGE}/students.json"
RECORDS_FOLDER = "records"
LOGO_FILE = "logo.png"

SPREADSHEET_COLUMNS = [
    "Name",
    "AbsenceCount",
    "AbsenceDates",
    "RemainingFee",
    "AttendanceCount"
]

WINDOW_WIDTH = 1100
WINDOW_HEIGHT = 650
DEFAULT_FONT = ("Arial", 10)
TITLE_FONT = ("Arial", 18, "bold")
