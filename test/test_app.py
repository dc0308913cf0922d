from chalicelib.constants.status_codes import http200, http401
from test.utils.request_utils import make_request, body


def test_index(gateway):
    response = make_request(gateway, endpoint='/health-check')
    assert response['statusCode'] == http200
    assert body(response) == {'health': 'check'}


def test_error_body_has_message_and_error_id(gateway):
    response = make_request(gateway, endpoint='/menu-items', token='not-a-token')
    assert response['statusCode'] == http401
    error = body(response)
    assert error['message'] == 'Token is not valid'
    assert error['error_id']


def test_malformed_json_body(gateway, restaurant):
    response = gateway.handle_request(
        method='POST',
        path='/menu-items',
        headers={'content-type': 'application/json', 'authorization': f'Bearer {restaurant["token"]}'},
        body='{"name": '
    )
    assert response['statusCode'] == 400
    assert body(response)['message'] == 'Request body is not a valid JSON'
