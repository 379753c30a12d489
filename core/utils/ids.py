"""
Centralized record ID generation.

User and order IDs are opaque to clients.
"""

from uuid import uuid4


def generate_record_id() -> str:
    """Generate a globally unique, opaque record ID."""
    return uuid4().hex
