from datetime import datetime, timedelta, timezone
from decimal import Decimal

from chalicelib.constants import keys_structure
from chalicelib.constants.status_codes import http200, http400, http403
from chalicelib.utils import db
from test.utils.request_utils import make_request, make_form_request, body, jpeg_file, stored_images, \
    create_test_promotion


def days_from_now(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat(timespec='seconds')


def test_create_promotion_defaults(gateway, restaurant):
    promotion = create_test_promotion(gateway, restaurant['token'])
    assert promotion['is_active'] is True
    assert promotion['start_date'] == promotion['date_created']
    assert promotion['end_date'] is None
    assert promotion['owner_id'] == restaurant['id']

    response = make_request(gateway, endpoint='/promotions', token=restaurant['token'])
    assert response['statusCode'] == http200
    assert [item['id'] for item in body(response)] == [promotion['id']]


def test_promotion_record_keeps_all_fields(gateway, restaurant):
    promotion = create_test_promotion(gateway, restaurant['token'], discount_percentage='12.5',
                                      end_date=days_from_now(3))
    record = db.get_db_item(keys_structure.promotions_pk, promotion['id'])
    assert record['title'] == 'Happy hour'
    assert record['description'] == 'Two drinks for one'
    assert record['discount_percentage'] == Decimal('12.50')
    assert record['owner_id'] == restaurant['id']
    assert record['is_active'] is True
    assert record['start_date'] == promotion['start_date']
    assert record['end_date'] == promotion['end_date']
    assert 'image_url' not in record


def test_create_promotion_form(gateway, restaurant):
    response = make_form_request(gateway, endpoint='/promotions', token=restaurant['token'], fields={
        'title': 'Weekend brunch',
        'description': 'Free coffee',
        'discount_percentage': '15',
        'end_date': '2099-01-01',
        'is_active': 'true'
    }, files=[jpeg_file('brunch.jpg')])
    assert response['statusCode'] == 201, response['body']
    promotion = body(response)
    assert promotion['end_date'] == '2099-01-01T00:00:00+00:00'
    assert promotion['discount_percentage'] == 15
    assert promotion['image_url'].startswith('/uploads/')
    assert len(stored_images()) == 1


def test_create_promotion_missing_fields(gateway, restaurant):
    response = make_request(gateway, endpoint='/promotions', method='POST',
                            json_body={'title': 'No description'}, token=restaurant['token'])
    assert response['statusCode'] == http400
    assert body(response)['message'] == 'Fields title, description are required'


def test_create_promotion_invalid_discount(gateway, restaurant):
    for invalid in ('150', '-5', '1e27', 'half'):
        response = make_request(gateway, endpoint='/promotions', method='POST', token=restaurant['token'],
                                json_body={'title': 'Discount', 'description': 'Bad', 'discount_percentage': invalid})
        assert response['statusCode'] == http400, invalid
    assert body(make_request(gateway, endpoint='/promotions', token=restaurant['token'])) == []


def test_create_promotion_invalid_dates(gateway, restaurant):
    for invalid in ({'end_date': 'next week'}, {'start_date': days_from_now(2), 'end_date': days_from_now(1)}):
        response = make_request(gateway, endpoint='/promotions', method='POST', token=restaurant['token'],
                                json_body={'title': 'Dates', 'description': 'Bad', **invalid})
        assert response['statusCode'] == http400, invalid


def test_public_promotions_are_currently_valid(gateway, restaurant):
    token = restaurant['token']
    open_ended = create_test_promotion(gateway, token, title='Open ended')
    tomorrow = create_test_promotion(gateway, token, title='Ends tomorrow', end_date=days_from_now(1))
    create_test_promotion(gateway, token, title='Ended yesterday',
                          start_date=days_from_now(-3), end_date=days_from_now(-1))
    create_test_promotion(gateway, token, title='Inactive', is_active=False)

    response = make_request(gateway, endpoint=f'/public/promotions/{restaurant["id"]}')
    assert response['statusCode'] == http200
    assert sorted(item['id'] for item in body(response)) == sorted([open_ended['id'], tomorrow['id']])


def test_public_promotions_of_unknown_user(gateway):
    response = make_request(gateway, endpoint='/public/promotions/unknown-user')
    assert response['statusCode'] == http200
    assert body(response) == []


def test_update_promotion_clears_end_date(gateway, restaurant):
    promotion = create_test_promotion(gateway, restaurant['token'], end_date=days_from_now(5))
    response = make_form_request(gateway, endpoint=f'/promotions/{promotion["id"]}', method='PUT',
                                 token=restaurant['token'], fields={'end_date': '', 'is_active': 'false'})
    assert response['statusCode'] == http200, response['body']
    updated = body(response)
    assert updated['end_date'] is None
    assert updated['is_active'] is False

    listed = body(make_request(gateway, endpoint='/promotions', token=restaurant['token']))[0]
    assert listed.get('end_date') is None
    assert listed['is_active'] is False


def test_delete_promotion_of_another_user(gateway, restaurant, other_restaurant):
    promotion = create_test_promotion(gateway, restaurant['token'])
    response = make_request(gateway, endpoint=f'/promotions/{promotion["id"]}', method='DELETE',
                            token=other_restaurant['token'])
    assert response['statusCode'] == http403
    assert len(body(make_request(gateway, endpoint='/promotions', token=restaurant['token']))) == 1

    response = make_request(gateway, endpoint=f'/promotions/{promotion["id"]}', method='DELETE',
                            token=restaurant['token'])
    assert response['statusCode'] == http200
    assert body(response)['message'] == 'Promotion deleted successfully'
