"""
Error Taxonomy
Every rejected operation raises one of these; the registered handlers
render them as JSON with a distinguishable ``error`` kind.
"""
import logging

from flask import jsonify

logger = logging.getLogger(__name__)


class PortalError(Exception):
    """Base class for all portal errors"""
    status_code = 500
    kind = 'internal_error'
    default_message = 'An internal error occurred.'

    def __init__(self, message=None, errors=None):
        self.message = message or self.default_message
        self.errors = errors or {}
        super().__init__(self.message)

    def to_dict(self):
        payload = {'message': self.message, 'error': self.kind}
        if self.errors:
            payload['errors'] = self.errors
        return payload


class NotFoundError(PortalError):
    """Referenced exam, submission, answer or question does not exist"""
    status_code = 404
    kind = 'not_found'
    default_message = 'Resource not found.'


class AuthorizationError(PortalError):
    """Actor lacks rights over the target exam or submission"""
    status_code = 403
    kind = 'forbidden'
    default_message = 'You are not authorized to perform this action.'


class AuthenticationError(AuthorizationError):
    """No valid teacher session"""
    status_code = 401
    kind = 'unauthorized'
    default_message = 'Unauthorized. Please log in as a teacher.'


class ConflictError(PortalError):
    """Operation conflicts with the current state (already submitted, duplicate start)"""
    status_code = 409
    kind = 'conflict'
    default_message = 'The request conflicts with the current state.'


class ValidationError(PortalError):
    """Malformed input, rejected before any mutation"""
    status_code = 400
    kind = 'validation_error'
    default_message = 'Invalid input data.'


class StorageError(PortalError):
    """Underlying transactional write failed and was rolled back"""
    status_code = 500
    kind = 'storage_error'
    default_message = 'A storage error occurred. No changes were saved.'


def register_error_handlers(app):
    """Render PortalError subclasses as JSON responses"""

    @app.errorhandler(PortalError)
    def handle_portal_error(error):
        if error.status_code >= 500:
            logger.error('%s: %s', error.kind, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify(NotFoundError().to_dict()), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({'message': 'Method not allowed.', 'error': 'method_not_allowed'}), 405
