# core/exceptions.py
"""
Registry error taxonomy
Every failure raised by the registry is one of these; the API layer maps them to HTTP codes
"""


class RegistryError(Exception):
    """Base class for registry failures"""
    kind = 'registry_error'
    status_code = 500


class ValidationError(RegistryError):
    """Malformed input (empty required field, bad id, bad pagination)"""
    kind = 'validation_error'
    status_code = 400


class Unauthorized(RegistryError):
    """Caller role does not match the role the transition requires"""
    kind = 'unauthorized'
    status_code = 403


class NotFound(RegistryError):
    kind = 'not_found'
    status_code = 404


class InvalidTransition(RegistryError):
    """Current status does not allow the requested transition"""
    kind = 'invalid_transition'
    status_code = 409


class LedgerConnectionError(RegistryError, ConnectionError):
    """Backend unreachable or request timed out before submission"""
    kind = 'connection_error'
    status_code = 503


class ConfirmationTimeout(RegistryError):
    """The caller stopped waiting; the transition itself keeps going"""
    kind = 'confirmation_pending'
    status_code = 202


class AuthError(Exception):
    """Missing or invalid bearer token"""
    pass
