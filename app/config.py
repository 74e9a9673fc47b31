# app/config.py

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./booking.db")

# Auth
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn("SECRET_KEY not set, using insecure development key", RuntimeWarning, stacklevel=2)
    SECRET_KEY = "change-me-later"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
# Phones that get the admin role when they register
ADMIN_PHONES = [p.strip() for p in os.getenv("ADMIN_PHONES", "").split(",") if p.strip()]

# Calendar
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "UTC")
DEFAULT_WORK_START_HOUR = int(os.getenv("DEFAULT_WORK_START_HOUR", "9"))
DEFAULT_WORK_END_HOUR = int(os.getenv("DEFAULT_WORK_END_HOUR", "17"))
DEFAULT_SMS_REMINDER_MINUTES = int(os.getenv("DEFAULT_SMS_REMINDER_MINUTES", "60"))
# "allow" lets admin blocks overlap anything, "reject" runs the booking overlap check
BLOCK_OVERLAP_POLICY = os.getenv("BLOCK_OVERLAP_POLICY", "allow").lower()

# Twilio SMS
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_MESSAGING_SERVICE_SID = os.getenv("TWILIO_MESSAGING_SERVICE_SID")
TWILIO_FROM_NUMBER = os.getenv("TWILIO_FROM_NUMBER")
TWILIO_API_BASE = os.getenv("TWILIO_API_BASE", "https://api.twilio.com/2010-04-01")
NOTIFICATION_MAX_ATTEMPTS = int(os.getenv("NOTIFICATION_MAX_ATTEMPTS", "3"))

CRON_SECRET = os.getenv("CRON_SECRET")
