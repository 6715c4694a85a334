"""
One-time passcode storage for admin login.

``InMemoryOtpStore`` is process-local: a deployment with several workers must
swap in a shared store with native TTL implementing the same interface.
All operations on the store are serialized by one lock, so ``consume`` is an
atomic compare-and-delete and cannot interleave with a concurrent resend.
"""
from __future__ import annotations

import enum
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

OTP_LENGTH = 6


class OtpCheck(enum.Enum):
    OK = "ok"
    MISSING = "missing"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class OtpEntry:
    otp: str
    expires_at: float
    last_sent_at: float


def generate_otp() -> str:
    """Six-digit numeric code, never starting with 0."""
    return str(100000 + secrets.randbelow(900000))


class OtpStore(Protocol):
    def put(self, email: str, otp: str, ttl_seconds: int) -> OtpEntry: ...

    def get(self, email: str) -> Optional[OtpEntry]: ...

    def consume(self, email: str, otp: str) -> OtpCheck: ...


class InMemoryOtpStore:
    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._entries: Dict[str, OtpEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def put(self, email: str, otp: str, ttl_seconds: int) -> OtpEntry:
        """Store a code for ``email``, replacing any pending one."""
        now = self._clock()
        entry = OtpEntry(otp=otp, expires_at=now + ttl_seconds, last_sent_at=now)
        with self._lock:
            self._entries[email] = entry
        return entry

    def get(self, email: str) -> Optional[OtpEntry]:
        with self._lock:
            return self._entries.get(email)

    def consume(self, email: str, otp: str) -> OtpCheck:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(email)
            if entry is None:
                return OtpCheck.MISSING
            if now > entry.expires_at:
                del self._entries[email]
                return OtpCheck.EXPIRED
            if not secrets.compare_digest(entry.otp, otp or ""):
                return OtpCheck.MISMATCH
            del self._entries[email]
            return OtpCheck.OK
