"""Application-wide constants and default policy values."""

# Promotion policy defaults (overridable through configuration)
DEFAULT_PROMOTION_DURATION_DAYS = 30
DEFAULT_PROMOTION_EXTENSION_DAYS = 30

# Supabase table names
JOBS_TABLE = "jobs"
PROMOTION_REQUESTS_TABLE = "featured_job_requests"
NOTIFICATIONS_TABLE = "notifications"

# Default audit notes written by the combined job review
DEFAULT_APPROVAL_NOTES = "Approved by admin"
DEFAULT_REJECTION_NOTES = "Rejected by admin"

# Currency used when a payment request does not name one
DEFAULT_CURRENCY = "ETB"

# Header carrying the acting administrator's id on admin API calls
ACTOR_HEADER = "X-Actor-Id"
