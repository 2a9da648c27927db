"""
Custom exceptions for service layer
"""

import functools

import requests


class ServiceError(Exception):
    """Base exception for service layer errors"""
    kind = 'service_error'
    status_code = 500


class ValidationError(ServiceError):
    """Raised when input validation fails"""
    kind = 'validation_error'
    status_code = 400


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found"""
    kind = 'not_found'
    status_code = 404


class ConflictError(ServiceError):
    """Raised when an action is not valid in the current workflow state"""
    kind = 'conflict'
    status_code = 409


class NotConfiguredError(ServiceError):
    """Raised when a credential required for an upstream call is missing"""
    kind = 'not_configured'
    status_code = 400


class UpstreamError(ServiceError):
    """Raised when the OCR or document database provider rejects a request"""
    kind = 'upstream_error'
    status_code = 502

    def __init__(self, message: str = "", status: int | None = None, code: str | None = None):
        super().__init__(message)
        self.status = status
        self.code = code


class EmptyResultError(ServiceError):
    """Raised when OCR ran but found no text"""
    kind = 'empty_result'
    status_code = 422


class StorageError(ServiceError):
    """Raised when the settings file cannot be written"""
    kind = 'storage_error'
    status_code = 500


def error_details(error: ServiceError) -> dict:
    """Machine-readable details for an error response"""
    details = {'kind': error.kind}
    if isinstance(error, UpstreamError):
        if error.status is not None:
            details['upstream_status'] = error.status
        if error.code:
            details['upstream_code'] = error.code
    return details


def handle_service_exceptions(logger=None):
    """Decorator converting transport failures of upstream calls into UpstreamError"""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ServiceError:
                # Re-raise our own service errors
                raise
            except requests.exceptions.ConnectionError as e:
                if logger:
                    logger.error(f"HTTP connection error in {func.__name__}: {e}")
                raise UpstreamError(f"Unable to connect to external service: {e}") from e
            except requests.exceptions.Timeout as e:
                if logger:
                    logger.error(f"HTTP timeout error in {func.__name__}: {e}")
                raise UpstreamError(f"Request timed out: {e}") from e
            except requests.exceptions.JSONDecodeError as e:
                if logger:
                    logger.error(f"Non-JSON upstream response in {func.__name__}: {e}")
                raise UpstreamError(f"Unexpected response from external service: {e}") from e
            except requests.exceptions.RequestException as e:
                if logger:
                    logger.error(f"HTTP request error in {func.__name__}: {e}")
                raise UpstreamError(f"External service error: {e}") from e
            except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
                if logger:
                    logger.error(f"Malformed upstream response in {func.__name__}: {e}")
                raise UpstreamError(f"Unexpected response from external service: {e}") from e
        return wrapper
    return decorator
