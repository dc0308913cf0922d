import functools
import os

import boto3

from botocore.config import Config

main_boto_region = os.environ.get('MAIN_BOTO_REGION', 'eu-central-1')
aws_config_ddb = Config(region_name=os.environ.get('AWS_REGION', main_boto_region))


# Clients are created on first use so that the region/endpoint of the running stage is picked up.

@functools.lru_cache(maxsize=None)
def dynamodb_resource():
    if os.environ.get('ENDPOINT_URL'):
        return boto3.resource('dynamodb', endpoint_url=os.environ.get('ENDPOINT_URL'), config=aws_config_ddb)
    return boto3.resource('dynamodb', config=aws_config_ddb)


# S3 Client.
# Clients provide a low-level interface to AWS services whose methods map close to 1:1 with service APIs.
@functools.lru_cache(maxsize=None)
def s3_client():
    return boto3.client('s3', region_name=main_boto_region)


def reset_clients():
    dynamodb_resource.cache_clear()
    s3_client.cache_clear()
