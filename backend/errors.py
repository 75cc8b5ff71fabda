# backend/errors.py
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Base error; ``status_code`` is the HTTP status it maps to"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    status_code = 400


class NotFoundError(MarketplaceError):
    status_code = 404


class ConflictError(MarketplaceError):
    status_code = 409


class ConfigurationError(MarketplaceError):
    status_code = 500


class UpstreamError(MarketplaceError):
    status_code = 500


@contextmanager
def upstream_errors(message: str):
    """Re-raise datastore failures as UpstreamError with a route-specific message"""
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception(f"{message}: {e}")
        raise UpstreamError(message) from e
