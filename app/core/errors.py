from typing import Optional


"""Errors raised by the outbound service clients. - errors"""


class UpstreamError(Exception):
    """An external service (database, marketing API) failed or rejected a call. - upstream_error

    status_code is the HTTP status the relay should answer with: 504 for
    timeouts, 502 for everything else. upstream_status is the status the
    external service returned, when it answered at all.
    """

    def __init__(self, service: str, message: str, status_code: int = 502, upstream_status: Optional[int] = None):
        super().__init__(f"{service}: {message}")
        self.service = service
        self.message = message
        self.status_code = status_code
        self.upstream_status = upstream_status


class UpstreamTimeout(UpstreamError):
    """The external service did not answer in time. - upstream_timeout"""

    def __init__(self, service: str, message: str):
        super().__init__(service, message, status_code=504)
