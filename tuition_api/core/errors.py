"""Error kinds raised by services and mapped to HTTP responses in main."""

from fastapi import status


class ServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Request failed.'

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Unauthorized access.'


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Forbidden access.'


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'


class BadInput(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request.'


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Request conflicts with the current state.'


class UpstreamFailure(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Database unavailable. Verify DATABASE_URL and database credentials.'


class PaymentProcessorFailure(UpstreamFailure):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Payment processor unavailable.'
