"""
Core utilities shared across the V-Cards API.

This package hosts configuration, logging, password/JWT security and the
SMTP mailer. Services depend on these primitives instead of reading the
environment or talking to SMTP directly.
"""
