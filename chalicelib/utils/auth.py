import functools
import os
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import bcrypt
import jwt
from chalice.app import Request

from chalicelib.constants import keys_structure
from chalicelib.constants.constants import DEFAULT_BCRYPT_ROUNDS, DEFAULT_TOKEN_EXPIRATION_HOURS, \
    TOKEN_ALGORITHM, ROLE_PLATFORM_ADMIN
from chalicelib.utils import exceptions as utils_exceptions, db as utils_db
from chalicelib.utils.logger import log_request, logger


def jwt_secret() -> str:
    return os.environ['JWT_SECRET']


def token_expiration() -> timedelta:
    return timedelta(hours=float(os.environ.get('TOKEN_EXPIRATION_HOURS', DEFAULT_TOKEN_EXPIRATION_HOURS)))


def bcrypt_rounds() -> int:
    return int(os.environ.get('BCRYPT_ROUNDS', DEFAULT_BCRYPT_ROUNDS))


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=bcrypt_rounds())).decode('utf-8')


def check_password(password: str, password_hash: Optional[str]) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        logger.warning('check_password ::: stored hash is malformed')
        return False


def issue_token(user_id: str, role: str, username: str = None, email: str = None,
                restaurant_name: str = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        'sub': user_id,
        'role': role,
        'username': username,
        'email': email,
        'restaurant_name': restaurant_name,
        'iat': now,
        'exp': now + token_expiration()
    }
    return jwt.encode(payload, jwt_secret(), algorithm=TOKEN_ALGORITHM)


def verify_token(token: Optional[str]) -> Dict:
    if not token:
        raise utils_exceptions.AuthorizationException('No token, authorization denied')
    try:
        claims = jwt.decode(token, jwt_secret(), algorithms=[TOKEN_ALGORITHM], options={'require': ['sub', 'exp']})
    except jwt.ExpiredSignatureError:
        raise utils_exceptions.AuthorizationException('Token has expired')
    except jwt.InvalidTokenError as error:
        logger.info(f'verify_token ::: {error}')
        raise utils_exceptions.AuthorizationException('Token is not valid')
    return claims


def get_token_from_request(request: Request) -> Optional[str]:
    header = request.headers.get('authorization') or request.headers.get('x-auth-token')
    if not header:
        return None
    scheme, _, credentials = header.strip().partition(' ')
    if scheme.lower() == 'bearer':
        return credentials.strip() or None
    return header.strip()


def get_auth_result(request: Request) -> Dict:
    """
    Verified claims of the request's token, the user must still exist and the role is read from the store
    """
    claims = verify_token(get_token_from_request(request))
    return {
        'user_id': claims['sub'],
        'role': get_user_role(claims['sub']),
        'username': claims.get('username'),
        'email': claims.get('email')
    }


def get_user_role(user_id: str) -> str:
    """ Live role of the user, a role embedded into an older token is never trusted for admin checks """
    try:
        user_item = utils_db.get_db_item(
            partkey=keys_structure.users_pk,
            sortkey=keys_structure.users_sk.format(user_id=user_id)
        )
    except utils_exceptions.RecordNotFound:
        raise utils_exceptions.AuthorizationException('User of the token does not exist')
    return user_item.get('role')


def is_platform_admin(user_id: str) -> bool:
    return get_user_role(user_id) == ROLE_PLATFORM_ADMIN


def authenticate_class(func):
    """
    Wrapper for classmethods which require user's authentication
    the request is the first argument after the class
    """

    @functools.wraps(func)
    def result_auth(*args, **kwargs):
        request = args[1]
        log_request(request)
        auth_result = get_auth_result(request)
        setattr(request, 'auth_result', auth_result)
        logger.info(f'authenticate_class ::: user_id={auth_result["user_id"]}, func.__name__ {func.__name__}')
        return func(*args, **kwargs)

    return result_auth


def require_platform_admin(func):
    """
    Wrapper for classmethods available only to platform admins,
    composes with authenticate_class
    """

    @functools.wraps(func)
    def result_admin(*args, **kwargs):
        request = args[1]
        user_id = request.auth_result['user_id']
        role = request.auth_result['role']
        if role != ROLE_PLATFORM_ADMIN:
            logger.warning(f'require_platform_admin ::: {user_id=} with {role=} denied')
            raise utils_exceptions.AccessDenied('Access denied. Platform admin privileges required.')
        return func(*args, **kwargs)

    return authenticate_class(result_admin)
