"""ULID primary keys for workspaces, users, appointments and payments."""

import ulid


def generate_ulid() -> str:
    """Return a new time-ordered id as a 26-character string."""
    return str(ulid.new())
