from chalice import Response
from chalice.app import Request

from chalicelib.constants.constants import ROLE_STANDARD, ROLE_PLATFORM_ADMIN, PLATFORM_RESTAURANT_NAME
from chalicelib.constants.status_codes import http200, http201
from chalicelib.users import User
from chalicelib.utils import data as utils_data
from chalicelib.utils.exceptions import AuthorizationException, ValidationException
from chalicelib.utils.logger import logger, log_request

INVALID_CREDENTIALS = 'Invalid credentials'


def _auth_response(user: User, status_code: int, **extra) -> Response:
    return Response(status_code=status_code, body={'token': user.issue_token(), 'user': user.to_ui(), **extra})


def register(request: Request) -> Response:
    """
    Creates a standard user, the credential is returned right away
    """
    log_request(request)
    body = utils_data.parse_raw_body(request)
    user = User.init_new(body, role=ROLE_STANDARD)
    user.create()
    logger.info(f'register ::: user {user.id_} registered')
    return _auth_response(user, http201)


def login(request: Request) -> Response:
    log_request(request)
    body = utils_data.parse_raw_body(request)
    email, password = body.get('email'), body.get('password')
    if not isinstance(email, str) or not isinstance(password, str):
        raise AuthorizationException(INVALID_CREDENTIALS)

    users = User.find_by_email(email)
    if not users or not users[0].check_password(password):
        logger.warning('login ::: unknown email or wrong password')
        raise AuthorizationException(INVALID_CREDENTIALS)
    user = users[0]
    logger.info(f'login ::: user {user.id_} logged in')
    return _auth_response(user, http200)


def create_superuser(request: Request) -> Response:
    """
    Bootstrap of the first platform admin, closed once any platform admin exists
    """
    log_request(request)
    if User.platform_admin_exists():
        raise ValidationException('Platform admin already exists')
    body = utils_data.parse_raw_body(request)
    user = User.init_new({**body, 'restaurant_name': PLATFORM_RESTAURANT_NAME}, role=ROLE_PLATFORM_ADMIN)
    user.create()
    logger.info(f'create_superuser ::: platform admin {user.id_} created')
    return _auth_response(user, http201, message='Platform admin created successfully')
