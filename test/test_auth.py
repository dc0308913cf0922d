import os
from datetime import datetime, timedelta, timezone

import jwt
from boto3.dynamodb.conditions import Key

from chalicelib.constants import keys_structure
from chalicelib.constants.status_codes import http200, http201, http400, http401, http403
from chalicelib.utils import db
from chalicelib.utils.auth import issue_token
from test.utils.request_utils import make_request, body, register_user, USER_PASSWORD


def login(gateway, email, password):
    return make_request(gateway, endpoint='/auth/login', method='POST',
                        json_body={'email': email, 'password': password})


def test_register_and_login(gateway):
    response = make_request(gateway, endpoint='/auth/register', method='POST', json_body={
        'username': 'trattoria',
        'email': 'Chef@Trattoria.test',
        'password': 'secret-pass',
        'restaurant_name': 'Trattoria'
    })
    assert response['statusCode'] == http201
    user = body(response)['user']
    assert user['email'] == 'chef@trattoria.test'
    assert user['role'] == 'standard'
    assert 'password_hash' not in user
    assert 'password' not in user

    response = login(gateway, 'chef@trattoria.test', 'secret-pass')
    assert response['statusCode'] == http200
    claims = jwt.decode(body(response)['token'], os.environ['JWT_SECRET'], algorithms=['HS256'])
    assert claims['sub'] == user['id']
    assert claims['username'] == 'trattoria'
    assert claims['restaurant_name'] == 'Trattoria'
    assert claims['role'] == 'standard'
    assert claims['exp'] - claims['iat'] == 24 * 60 * 60


def test_register_duplicate_is_rejected(gateway, admin, restaurant):
    for duplicate in (
            {'username': 'pizzeria', 'email': 'new@pizzeria.test', 'password': 'x'},
            {'username': 'new-name', 'email': 'OWNER@pizzeria.test', 'password': 'x'}
    ):
        response = make_request(gateway, endpoint='/auth/register', method='POST', json_body=duplicate)
        assert response['statusCode'] == http400
        assert body(response)['message'] == 'User already exists'

    users = body(make_request(gateway, endpoint='/superuser/users', token=admin['token']))
    assert sorted(user['username'] for user in users) == ['pizzeria', 'platform']


def test_register_missing_fields(gateway):
    response = make_request(gateway, endpoint='/auth/register', method='POST',
                            json_body={'username': 'no-password', 'email': 'a@b.test'})
    assert response['statusCode'] == http400
    assert body(response)['message'] == 'Fields username, email, password are required'


def test_register_invalid_email(gateway):
    response = make_request(gateway, endpoint='/auth/register', method='POST',
                            json_body={'username': 'bad-email', 'email': 'not-an-email', 'password': 'x'})
    assert response['statusCode'] == http400


def test_login_invalid_credentials(gateway, restaurant):
    for email, password in (('owner@pizzeria.test', 'wrong'), ('nobody@pizzeria.test', USER_PASSWORD)):
        response = login(gateway, email, password)
        assert response['statusCode'] == http401
        assert body(response)['message'] == 'Invalid credentials'


def test_create_superuser_only_once(gateway, admin):
    response = make_request(gateway, endpoint='/auth/create-superuser', method='POST', json_body={
        'username': 'second', 'email': 'second@platform.test', 'password': 'x'
    })
    assert response['statusCode'] == http400
    assert body(response)['message'] == 'Platform admin already exists'


def test_superuser_has_platform_restaurant_name(gateway, admin):
    response = login(gateway, 'admin@platform.test', 'admin-password')
    user = body(response)['user']
    assert user['role'] == 'platform-admin'
    assert user['restaurant_name'] == 'Platform Management'


def test_missing_token(gateway):
    response = make_request(gateway, endpoint='/promotions')
    assert response['statusCode'] == http401
    assert body(response)['message'] == 'No token, authorization denied'


def test_x_auth_token_header(gateway, restaurant):
    response = make_request(gateway, endpoint='/promotions', headers={'x-auth-token': restaurant['token']})
    assert response['statusCode'] == http200


def test_expired_token(gateway, restaurant):
    issued = datetime.now(timezone.utc) - timedelta(hours=25)
    token = jwt.encode({'sub': restaurant['id'], 'role': 'standard', 'iat': issued,
                        'exp': issued + timedelta(hours=24)}, os.environ['JWT_SECRET'], algorithm='HS256')
    response = make_request(gateway, endpoint='/menu-items', token=token)
    assert response['statusCode'] == http401
    assert body(response)['message'] == 'Token has expired'


def test_token_with_wrong_signature(gateway, restaurant):
    token = jwt.encode({'sub': restaurant['id'], 'exp': datetime.now(timezone.utc) + timedelta(hours=1)},
                       'another-secret', algorithm='HS256')
    response = make_request(gateway, endpoint='/menu-items', token=token)
    assert response['statusCode'] == http401


def test_standard_user_is_not_platform_admin(gateway, restaurant):
    response = make_request(gateway, endpoint='/superuser/users', token=restaurant['token'])
    assert response['statusCode'] == http403


def test_role_claim_is_not_trusted(gateway, restaurant):
    token = issue_token(user_id=restaurant['id'], role='platform-admin')
    response = make_request(gateway, endpoint='/superuser/users', token=token)
    assert response['statusCode'] == http403


def test_token_of_deleted_user(gateway, admin):
    user = register_user(gateway, 'short-lived', 'short@lived.test')
    response = make_request(gateway, endpoint=f'/superuser/users/{user["id"]}', method='DELETE',
                            token=admin['token'])
    assert response['statusCode'] == http200

    response = make_request(gateway, endpoint='/superuser/advertisements', token=user['token'])
    assert response['statusCode'] == http401

    response = make_request(gateway, endpoint='/menu-items', method='POST', token=user['token'], json_body={
        'name': 'Ghost soup', 'description': 'Nobody owns it', 'price': 1, 'category': 'main'
    })
    assert response['statusCode'] == http401
    assert body(response)['message'] == 'User of the token does not exist'
    assert db.query_items_paged(Key('partkey').eq(keys_structure.menu_items_pk)) == []

    response = make_request(gateway, endpoint='/promotions', token=user['token'])
    assert response['statusCode'] == http401
