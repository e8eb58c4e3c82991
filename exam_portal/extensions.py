"""
Flask Extensions
Centralized extension initialization
"""
import logging
from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError

from exam_portal.errors import PortalError, StorageError

logger = logging.getLogger(__name__)

# Initialize extensions (without app binding)
db = SQLAlchemy()


@contextmanager
def atomic():
    """
    Single transactional boundary around a unit of work.
    Commits on success; any failure rolls everything back.
    SQLAlchemy errors surface as StorageError without storage detail.
    """
    try:
        yield db.session
        db.session.commit()
    except PortalError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception('Transaction rolled back after storage failure')
        raise StorageError() from exc
