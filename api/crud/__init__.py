"""
Generic CRUD scaffolding: handler factories plus the query-parameter
translator they share.
"""

from .handlers import (
    HandlerConfig,
    create_handler,
    delete_handler,
    read_many_handler,
    read_one_handler,
    update_handler,
)

__all__ = [
    "HandlerConfig",
    "create_handler",
    "delete_handler",
    "read_many_handler",
    "read_one_handler",
    "update_handler",
]
