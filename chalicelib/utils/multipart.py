from email.message import Message
from typing import Dict, List, NamedTuple, Tuple

from chalice.app import Request
from requests_toolbelt.multipart.decoder import MultipartDecoder, ImproperBodyPartContentException, \
    NonMultipartContentTypeException

from chalicelib.constants.constants import MULTIPART_FORM_DATA
from chalicelib.utils import data as utils_data
from chalicelib.utils.exceptions import ValidationException
from chalicelib.utils.logger import logger


class UploadedFile(NamedTuple):
    field_name: str
    filename: str
    content_type: str
    content: bytes


def is_multipart(request: Request) -> bool:
    return request.headers.get('content-type', '').lower().startswith(MULTIPART_FORM_DATA)


def _parse_content_disposition(value: str) -> Tuple[str, str]:
    message = Message()
    message['content-disposition'] = value
    return message.get_param('name', header='content-disposition'), message.get_filename()


def parse_multipart_request_data(request: Request) -> Tuple[Dict[str, str], List[UploadedFile]]:
    try:
        decoder = MultipartDecoder(request.raw_body or b'', request.headers['content-type'])
    except (ImproperBodyPartContentException, NonMultipartContentTypeException) as error:
        raise ValidationException(f'Malformed multipart body: {error}')

    fields: Dict[str, str] = {}
    files: List[UploadedFile] = []
    for part in decoder.parts:
        disposition = part.headers.get(b'Content-Disposition', b'').decode('utf-8')
        name, filename = _parse_content_disposition(disposition)
        if not name:
            continue
        if filename is not None:
            content_type = part.headers.get(b'Content-Type', b'application/octet-stream').decode('utf-8')
            files.append(UploadedFile(name, filename, content_type.lower(), part.content))
        else:
            fields[name] = part.text
    logger.info(f'parse_multipart_request_data ::: fields={list(fields)}, files={[f.filename for f in files]}')
    return fields, files


def parse_request_data(request: Request) -> Tuple[Dict, List[UploadedFile]]:
    """
    Create/update endpoints take either a JSON body or a multipart form with an optional file.
    Empty form values are kept, an empty optional field on update removes it
    """
    if is_multipart(request):
        return parse_multipart_request_data(request)
    return utils_data.parse_raw_body(request), []
