"""
Booth Client — Error taxonomy

OrderValidationError      local input problem, never sent to the server
TransientApiError         timeout / connection failure / 5xx: retry later
ApiError                  authoritative rejection by the server (4xx)
  OrderNotFoundError      404 on an order lookup
  AuthenticationError     401/403
  InvalidTransitionError  409 on a staff mutation
"""


class OrderValidationError(ValueError):
    pass


class TransientApiError(Exception):
    pass


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class OrderNotFoundError(ApiError):
    pass


class AuthenticationError(ApiError):
    pass


class InvalidTransitionError(ApiError):
    pass
