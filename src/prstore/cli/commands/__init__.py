"""Command implementations for prstore CLI."""

from .pull_requests import handle_list, handle_purge
from .status import handle_migrate, handle_status

__all__ = [
    "handle_migrate",
    "handle_status",
    "handle_list",
    "handle_purge",
]
