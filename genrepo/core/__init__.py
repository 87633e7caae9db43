"""Core module - Settings, exceptions, and logging.

Import exceptions directly where needed:

    from genrepo.core.exceptions import StoreUnavailableError
"""

from genrepo.core.config import settings

__all__ = [
    "settings",
]
