"""
Database utilities and error translation.
"""

import functools
import logging

from django.db import InterfaceError, OperationalError

from core.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


def store_operation(func):
    """
    Translate database connectivity failures into StoreUnavailableError.

    Wraps synchronous repository methods (apply before ``sync_to_async``)
    so that a lost database never surfaces as an invalid license.

    Usage:
        @sync_to_async
        @store_operation
        def find_by_key(self, key):
            ...
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.error(
                "Store operation %s failed: %s",
                func.__qualname__,
                e,
                exc_info=True,
            )
            raise StoreUnavailableError() from e

    return wrapper
