"""Application constants and configuration values."""

from practice_analytics.core.config import FRONTEND_URL

# Appointment (session) statuses, in display order for breakdown charts
APPOINTMENT_STATUSES = ("pending", "confirmed", "completed", "cancelled")

# Payment statuses, in display order for breakdown charts
PAYMENT_STATUSES = ("pending", "paid", "overdue")

# Payment statuses that count as money still owed
OUTSTANDING_PAYMENT_STATUSES = ("pending", "overdue")

# Named ranges accepted by the period resolver
NAMED_RANGES = ("week", "month", "quarter", "year")
CUSTOM_RANGE = "custom"

# Bucket granularity thresholds (inclusive span in calendar days)
# Daily up to a month, weekly up to a quarter, monthly beyond
DAY_BUCKET_MAX_SPAN_DAYS = 31
WEEK_BUCKET_MAX_SPAN_DAYS = 120

# Occupancy histograms
HOURS_PER_DAY = 24
# Sunday-first display order; index matches (datetime.weekday() + 1) % 7
WEEKDAY_LABELS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")

# CORS origins for the presentation layer
_CORS_ORIGINS_RAW = [
    "http://localhost:5173",  # Vite dev server
    FRONTEND_URL,
]
CORS_ORIGINS = sorted({origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()})
