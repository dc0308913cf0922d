import functools
from typing import Callable

from chalice import Response

from chalicelib.constants.status_codes import http400, http401, http403, http404, http500
from chalicelib.utils.exceptions import ValidationException, AuthorizationException, AccessDenied, \
    RecordNotFound, StoreException
from chalicelib.utils.logger import logger, log_exception


def error_response(error: Exception, msg: str = "", status_code: int = 400, public_message: str = None,
                   *args, **kwargs):
    log_exception(error, status_code, msg, *args, **kwargs)
    return Response(
        body={
            'message': public_message or str(error),
            'error_id': getattr(logger, 'current_request_id')
        },
        status_code=status_code,
        headers={'Content-Type': 'application/json'}
    )


def request_exception_handler(func: Callable):
    @functools.wraps(func)
    def result(*args, **kwargs):
        try:
            logger.info(f'Calling function {func.__name__}')
            return func(*args, **kwargs)
        except ValidationException as validation_error:
            return error_response(
                error=validation_error,
                msg=f'function = {func.__name__} , error = {validation_error}',
                status_code=http400)
        except AuthorizationException as not_authorized:
            return error_response(
                error=not_authorized,
                msg=f'function = {func.__name__} , error = {not_authorized}',
                status_code=http401)
        except AccessDenied as access_denied:
            return error_response(
                error=access_denied,
                msg=f'function = {func.__name__} , error = {access_denied}',
                status_code=http403)
        except RecordNotFound as not_found:
            return error_response(
                error=not_found,
                msg=f'function = {func.__name__} , error = {not_found}',
                status_code=http404)
        except StoreException as store_error:
            return error_response(
                error=store_error,
                msg=f'function = {func.__name__} , error = {store_error}',
                status_code=http500)
        except Exception as exception:
            return error_response(
                error=exception,
                msg=f'function = {func.__name__}, error = {exception}',
                status_code=http500,
                public_message='Internal server error')
    return result


def log_start_finish(func: Callable):
    @functools.wraps(func)
    def result(*args, **kwargs):
        logger.info(f'{func.__name__} ::: started')
        response = func(*args, **kwargs)
        logger.info(f'{func.__name__} ::: finished')
        return response
    return result
