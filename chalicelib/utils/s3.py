import os
from typing import Tuple

from botocore.exceptions import ClientError

from chalicelib.utils.boto_clients import s3_client
from chalicelib.utils.exceptions import RecordNotFound, StoreException
from chalicelib.utils.logger import logger, log_exception

NOT_FOUND_CODES = ('404', 'NoSuchKey', 'NotFound')


def images_bucket():
    return os.environ["IMAGES_BUCKET_NAME"]


def upload_file_to_s3(body: bytes, file_path: str, content_type: str) -> str:
    try:
        s3_client().put_object(Bucket=images_bucket(), Key=file_path, Body=body, ContentType=content_type)
    except ClientError as error:
        log_exception(error, msg=f'upload_file_to_s3 ::: {file_path=}')
        raise StoreException(f'Could not store file {file_path}')
    logger.info(f'upload_file_to_s3:: SUCCESS, file_path:{file_path} ')
    return file_path


def get_file_from_s3(file_path: str) -> Tuple[bytes, str]:
    try:
        response = s3_client().get_object(Bucket=images_bucket(), Key=file_path)
    except ClientError as error:
        if error.response.get('Error', {}).get('Code') in NOT_FOUND_CODES:
            raise RecordNotFound(f'File {file_path} not found')
        log_exception(error, msg=f'get_file_from_s3 ::: {file_path=}')
        raise StoreException(f'Could not read file {file_path}')
    return response['Body'].read(), response.get('ContentType', 'application/octet-stream')


def delete_file_from_s3(file_path: str) -> None:
    try:
        s3_client().delete_object(Bucket=images_bucket(), Key=file_path)
    except ClientError as error:
        log_exception(error, msg=f'delete_file_from_s3 ::: {file_path=}')
        raise StoreException(f'Could not delete file {file_path}')
    logger.info(f'delete_file_from_s3:: SUCCESS, file_path:{file_path} ')
