"""
Persistence adapters.

These modules encapsulate how data is stored and retrieved. Services depend
on ``SQLRepository`` rather than touching SQLAlchemy sessions directly.
"""
