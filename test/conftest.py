import os

REGION = 'eu-central-1'

os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
os.environ['AWS_SESSION_TOKEN'] = 'testing'
os.environ['AWS_DEFAULT_REGION'] = REGION
os.environ['MAIN_BOTO_REGION'] = REGION
os.environ.setdefault('GEN_TABLE_NAME', 'restaurant-menu-platform-test')
os.environ.setdefault('IMAGES_BUCKET_NAME', 'restaurant-menu-platform-test-images')
os.environ.setdefault('JWT_SECRET', 'test-secret')
os.environ.setdefault('BCRYPT_ROUNDS', '4')
os.environ.pop('ENDPOINT_URL', None)

import boto3  # noqa: E402
import pytest  # noqa: E402
from chalice.cli import factory  # noqa: E402
from chalice.local import LocalGateway  # noqa: E402
from moto import mock_aws  # noqa: E402

from chalicelib.utils.boto_clients import reset_clients  # noqa: E402
from test.utils.request_utils import create_platform_admin, register_user  # noqa: E402

PROJECT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def local_gateway() -> LocalGateway:
    config = factory.CLIFactory(
        project_dir=PROJECT_DIR, environ=os.environ).create_config_obj(chalice_stage_name='test')
    return LocalGateway(config.chalice_app, config)


@pytest.fixture(scope='session')
def chalice_gateway() -> LocalGateway:
    yield local_gateway()


@pytest.fixture
def aws():
    """ Fresh table and bucket for every test """
    with mock_aws():
        reset_clients()
        boto3.resource('dynamodb', region_name=REGION).create_table(
            TableName=os.environ['GEN_TABLE_NAME'],
            KeySchema=[
                {'AttributeName': 'partkey', 'KeyType': 'HASH'},
                {'AttributeName': 'sortkey', 'KeyType': 'RANGE'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'partkey', 'AttributeType': 'S'},
                {'AttributeName': 'sortkey', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )
        boto3.client('s3', region_name=REGION).create_bucket(
            Bucket=os.environ['IMAGES_BUCKET_NAME'],
            CreateBucketConfiguration={'LocationConstraint': REGION}
        )
        yield
        reset_clients()


@pytest.fixture
def gateway(chalice_gateway, aws) -> LocalGateway:
    return chalice_gateway


@pytest.fixture
def admin(gateway):
    return create_platform_admin(gateway)


@pytest.fixture
def restaurant(gateway):
    return register_user(gateway, 'pizzeria', 'owner@pizzeria.test', restaurant_name='Pizzeria')


@pytest.fixture
def other_restaurant(gateway):
    return register_user(gateway, 'sushi', 'owner@sushi.test', restaurant_name='Sushi Bar')
