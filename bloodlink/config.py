# bloodlink/config.py
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bloodlink.db")

DEFAULT_JWT_SECRET = "supersecretkey"
JWT_SECRET = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# "short" is the login session lifetime; "long" is kept for remember-me style clients
TOKEN_POLICIES = {
    "short": timedelta(hours=5),
    "long": timedelta(days=7),
}
TOKEN_POLICY = os.getenv("TOKEN_POLICY", "short")
if TOKEN_POLICY not in TOKEN_POLICIES:
    raise ValueError(f"TOKEN_POLICY must be one of {sorted(TOKEN_POLICIES)}")

_expire_hours = os.getenv("JWT_EXPIRE_HOURS")
TOKEN_TTL = timedelta(hours=int(_expire_hours)) if _expire_hours else TOKEN_POLICIES[TOKEN_POLICY]

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
