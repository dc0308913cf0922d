import json

from chalicelib.constants.status_codes import http200, http201, http400, http403, http404
from test.utils.request_utils import make_request, make_form_request, body, jpeg_file, stored_images


def create_test_advertisement(gateway, token, target_user_ids, **fields):
    response = make_form_request(gateway, endpoint='/superuser/advertisements', token=token, fields={
        'title': 'Summer festival',
        'target_user_ids': json.dumps(target_user_ids),
        **fields
    }, files=[jpeg_file('festival.jpg')])
    assert response['statusCode'] == http201, response['body']
    return body(response)


def test_create_advertisement(gateway, admin, restaurant):
    advertisement = create_test_advertisement(gateway, admin['token'], [restaurant['id'], restaurant['id']])
    assert advertisement['target_user_ids'] == [restaurant['id']]
    assert advertisement['is_active'] is True
    assert advertisement['image_url'].startswith('/uploads/')
    assert stored_images() == [advertisement['image_url'].lstrip('/')]

    response = make_request(gateway, endpoint='/superuser/advertisements', token=admin['token'])
    assert response['statusCode'] == http200
    assert [item['id'] for item in body(response)] == [advertisement['id']]


def test_create_advertisement_validation(gateway, admin, restaurant):
    targets = json.dumps([restaurant['id']])
    cases = [
        ({'target_user_ids': targets}, [jpeg_file()], 'Title is required'),
        ({'title': 'Ad'}, [jpeg_file()], 'Target users are required'),
        ({'title': 'Ad', 'target_user_ids': 'not json'}, [jpeg_file()], 'Invalid target users format'),
        ({'title': 'Ad', 'target_user_ids': '[]'}, [jpeg_file()], 'Target users are required'),
        ({'title': 'Ad', 'target_user_ids': '["missing-user"]'}, [jpeg_file()],
         'Target user missing-user does not exist'),
        ({'title': 'Ad', 'target_user_ids': targets}, [], 'Image is required'),
    ]
    for fields, files, message in cases:
        response = make_form_request(gateway, endpoint='/superuser/advertisements', token=admin['token'],
                                     fields=fields, files=files)
        assert response['statusCode'] == http400, fields
        assert body(response)['message'] == message
    assert stored_images() == []
    assert body(make_request(gateway, endpoint='/superuser/advertisements', token=admin['token'])) == []


def test_advertisements_require_platform_admin(gateway, restaurant):
    response = make_request(gateway, endpoint='/superuser/advertisements', token=restaurant['token'])
    assert response['statusCode'] == http403
    assert body(response)['message'] == 'Access denied. Platform admin privileges required.'

    response = make_form_request(gateway, endpoint='/superuser/advertisements', token=restaurant['token'],
                                 fields={'title': 'Ad', 'target_user_ids': json.dumps([restaurant['id']])},
                                 files=[jpeg_file()])
    assert response['statusCode'] == http403
    assert stored_images() == []


def test_public_advertisements_are_targeted(gateway, admin, restaurant, other_restaurant):
    targeted = create_test_advertisement(gateway, admin['token'], [restaurant['id']])
    create_test_advertisement(gateway, admin['token'], [other_restaurant['id']], title='Other')
    create_test_advertisement(gateway, admin['token'], [restaurant['id']], title='Paused', is_active='false')

    response = make_request(gateway, endpoint=f'/public/advertisements/{restaurant["id"]}')
    assert response['statusCode'] == http200
    assert [item['id'] for item in body(response)] == [targeted['id']]

    response = make_request(gateway, endpoint='/public/advertisements/nobody')
    assert body(response) == []


def test_delete_advertisement(gateway, admin, restaurant):
    advertisement = create_test_advertisement(gateway, admin['token'], [restaurant['id']])
    response = make_request(gateway, endpoint=f'/superuser/advertisements/{advertisement["id"]}',
                            method='DELETE', token=admin['token'])
    assert response['statusCode'] == http200
    assert body(response)['message'] == 'Advertisement deleted successfully'
    assert stored_images() == []

    response = make_request(gateway, endpoint=f'/superuser/advertisements/{advertisement["id"]}',
                            method='DELETE', token=admin['token'])
    assert response['statusCode'] == http404
    assert body(response)['message'] == 'Advertisement not found'
