import os
import re
import secrets
import time
from contextlib import contextmanager
from io import BytesIO
from typing import List, Optional

from chalice import Response
from PIL import Image

from chalicelib.constants.constants import IMAGE_FIELD_NAME, MAX_IMAGE_SIZE, ALLOWED_IMAGE_CONTENT_TYPES, \
    ALLOWED_IMAGE_EXTENSIONS, ALLOWED_IMAGE_FORMATS, UPLOADS_KEY_PREFIX
from chalicelib.constants.status_codes import http200
from chalicelib.utils import app as utils_app
from chalicelib.utils.exceptions import ValidationException, RecordNotFound
from chalicelib.utils.logger import logger
from chalicelib.utils.multipart import UploadedFile
from chalicelib.utils.s3 import upload_file_to_s3, delete_file_from_s3, get_file_from_s3

FILE_NAME_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]*$')
IMAGE_FORMAT_CONTENT_TYPES = {'JPEG': 'image/jpeg', 'PNG': 'image/png'}


def image_url_to_file_path(image_url: str) -> str:
    """ '/uploads/<name>' -> 'uploads/<name>' """
    file_name = os.path.basename(image_url or '')
    if not FILE_NAME_PATTERN.match(file_name):
        raise ValidationException(f'Invalid image reference {image_url}')
    return f'{UPLOADS_KEY_PREFIX}/{file_name}'


def delete_image(image_url: str) -> None:
    delete_file_from_s3(image_url_to_file_path(image_url))


def generate_file_name(original_filename: str) -> str:
    extension = os.path.splitext(original_filename)[1].lower()
    return f'{int(time.time() * 1000)}-{secrets.token_hex(6)}{extension}'


class ImageUpload:
    """
    One image per request under the 'image' form field.
    Validated before anything is written, stored on demand, removed again if the request fails later.
    """

    def __init__(self, uploaded_file: UploadedFile):
        self.uploaded_file = uploaded_file
        self.file_path: Optional[str] = None
        self.image_format: Optional[str] = None

    @classmethod
    def from_files(cls, files: List[UploadedFile], required: bool = False) -> Optional['ImageUpload']:
        unexpected = [file.field_name for file in files if file.field_name != IMAGE_FIELD_NAME]
        if unexpected:
            raise ValidationException(f'Unexpected file fields {unexpected}, only {IMAGE_FIELD_NAME} is accepted')
        if len(files) > 1:
            raise ValidationException('Only one image per request is allowed')
        if not files:
            if required:
                raise ValidationException('Image is required')
            return None
        image_upload = cls(files[0])
        image_upload.validate()
        return image_upload

    def validate(self) -> None:
        file = self.uploaded_file
        if len(file.content) > MAX_IMAGE_SIZE:
            raise ValidationException(f'Image is too large, max size is {MAX_IMAGE_SIZE // (1024 * 1024)} MB')
        if not file.content:
            raise ValidationException('Image is empty')
        extension = os.path.splitext(file.filename)[1].lower()
        if file.content_type not in ALLOWED_IMAGE_CONTENT_TYPES or extension not in ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationException('Only JPEG, JPG and PNG file formats are allowed!')
        try:
            with Image.open(BytesIO(file.content)) as image:
                image.verify()
                self.image_format = image.format
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as error:
            logger.warning(f'validate ::: {file.filename=} could not be decoded: {error}')
            raise ValidationException('Uploaded file is not a valid image')
        if self.image_format not in ALLOWED_IMAGE_FORMATS:
            raise ValidationException('Only JPEG, JPG and PNG file formats are allowed!')

    @property
    def image_url(self) -> Optional[str]:
        return f'/{self.file_path}' if self.file_path else None

    def store(self) -> str:
        self.file_path = f'{UPLOADS_KEY_PREFIX}/{generate_file_name(self.uploaded_file.filename)}'
        upload_file_to_s3(self.uploaded_file.content, self.file_path, IMAGE_FORMAT_CONTENT_TYPES[self.image_format])
        logger.info(f'store ::: image {self.uploaded_file.filename=} stored as {self.file_path}')
        return self.image_url

    def delete(self) -> None:
        if self.file_path:
            delete_file_from_s3(self.file_path)
            logger.info(f'delete ::: orphaned image {self.file_path} removed')
            self.file_path = None

    @staticmethod
    @contextmanager
    def cleanup_on_error(image_upload: Optional['ImageUpload']):
        try:
            yield image_upload
        except Exception:
            if image_upload is not None:
                image_upload.delete()
            raise


@utils_app.log_start_finish
def endpoint_get_image(file_name: str) -> Response:
    if not FILE_NAME_PATTERN.match(file_name or ''):
        raise RecordNotFound(f'Image {file_name} not found')
    body, content_type = get_file_from_s3(f'{UPLOADS_KEY_PREFIX}/{file_name}')
    return Response(status_code=http200, body=body, headers={'Content-Type': content_type})
