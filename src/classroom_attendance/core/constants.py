"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Server-side acceptance window for a submitted OTP, measured from generation.
OTP_FRESHNESS_SECONDS = 500

# Client-side display/rotation cadence. Independent of the acceptance window.
OTP_ROTATION_SECONDS = 20

OTP_MIN = 100000
OTP_MAX = 999999

EXPORT_SHEET_NAME = "Attendance"
EXPORT_COLUMNS = ("Name", "Roll No", "Timestamp")
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

MSG_ATTENDANCE_MARKED = "Attendance marked!"
MSG_SESSION_NOT_FOUND = "Session not found"
MSG_INVALID_OTP = "Invalid OTP"
MSG_OTP_EXPIRED = "OTP expired"
MSG_ALREADY_MARKED = "Already marked"
