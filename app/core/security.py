import hashlib
import secrets
import time


def generate_report_id() -> str:
    """
    Generate a report identifier.

    sha256 over the current time in milliseconds joined with 16 random bytes,
    truncated to 16 hex characters. Uniqueness is left to the primary key of
    the reports table.
    """
    timestamp = str(int(time.time() * 1000))
    combined = f"{timestamp}-{secrets.token_hex(16)}"
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()[:16]
