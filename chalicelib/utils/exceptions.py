__all__ = ["AuthorizationException", "AccessDenied", "RecordNotFound", "ValidationException",
           "StoreException", "RecordAlreadyExists"]


# Auth exceptions
class AuthorizationException(Exception):
    LEVEL = 'warning'


class AccessDenied(Exception):
    LEVEL = 'warning'


# Validations exceptions
class ValidationException(Exception):
    LEVEL = 'warning'


# DynamoDB exceptions
class RecordNotFound(Exception):
    LEVEL = 'info'


class RecordAlreadyExists(Exception):
    LEVEL = 'warning'


class StoreException(Exception):
    LEVEL = 'exception'
