from typing import Tuple, List, Dict, Optional
from uuid import uuid4

from boto3.dynamodb.conditions import Key, Attr
from chalice import Response

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.status_codes import http200, http201
from chalicelib.images import ImageUpload, delete_image
from chalicelib.menu_items import non_empty_str
from chalicelib.utils import auth as utils_auth, app as utils_app, data as utils_data, db as utils_db, \
    exceptions, multipart as utils_multipart
from chalicelib.utils.logger import logger


class Advertisement(EntityBase):
    """
    Platform owned advertisement, shown to every user listed in target_user_ids while active
    """
    pk = keys_structure.advertisements_pk
    sk = keys_structure.advertisements_sk

    required_fields = ('title', 'image_url', 'target_user_ids')

    required_immutable_fields_validation = {
        'id_': lambda x: isinstance(x, str),
        'title': non_empty_str,
        'image_url': non_empty_str,
        'target_user_ids': lambda x: isinstance(x, list) and len(x) > 0,
        'created_by': lambda x: isinstance(x, str),
        'date_created': lambda x: isinstance(x, str)
    }

    required_mutable_fields_validation = {
        'is_active': lambda x: isinstance(x, bool)
    }

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_)

        self.request_data = kwargs.get('request_data') or {}
        self.title: str = kwargs.get('title')
        self.image_url: str = kwargs.get('image_url')
        self.target_user_ids: List[str] = list(kwargs.get('target_user_ids') or [])
        self.is_active: bool = kwargs.get('is_active', True)
        self.created_by: str = kwargs.get('created_by') or \
            self.request_data.get('auth_result', {}).get('user_id')
        self.date_created: str = kwargs.get('date_created') or utils_data.now_iso()
        self.image_upload: Optional[ImageUpload] = None
        self.record_type = 'advertisement'

    @classmethod
    def init_get_by_id(cls, id_):
        c = cls(id_=id_)
        try:
            c.__init__(**c._get_db_item())
        except exceptions.RecordNotFound:
            raise exceptions.RecordNotFound('Advertisement not found')
        return c

    @staticmethod
    def get_all(filter_expression=None) -> List['Advertisement']:
        records = utils_db.query_items_paged(
            Key('partkey').eq(keys_structure.advertisements_pk),
            filter_expression=filter_expression
        )
        return sorted((Advertisement(**record) for record in records),
                      key=lambda advertisement: advertisement.date_created, reverse=True)

    @staticmethod
    def validate_target_user_ids(value) -> List[str]:
        if value in (None, ''):
            raise exceptions.ValidationException('Target users are required')
        target_user_ids = utils_data.to_str_list(value, 'target users')
        if not target_user_ids:
            raise exceptions.ValidationException('Target users are required')
        for user_id in target_user_ids:
            try:
                utils_db.get_db_item(keys_structure.users_pk, keys_structure.users_sk.format(user_id=user_id))
            except exceptions.RecordNotFound:
                raise exceptions.ValidationException(f'Target user {user_id} does not exist')
        return target_user_ids

    # Platform admin endpoints

    @classmethod
    @utils_auth.require_platform_admin
    def init_request_get_all(cls, request):
        return cls(id_=None, request_data={'auth_result': request.auth_result})

    @classmethod
    @utils_auth.require_platform_admin
    def init_request_create(cls, request):
        logger.info("init_request_create ::: started")
        fields, files = utils_multipart.parse_request_data(request)
        title = fields.get('title')
        if not non_empty_str(title):
            raise exceptions.ValidationException('Title is required')
        target_user_ids = cls.validate_target_user_ids(fields.get('target_user_ids'))
        c = cls(
            id_=str(uuid4()),
            title=title.strip(),
            target_user_ids=target_user_ids,
            is_active=utils_data.to_bool(fields.get('is_active'), 'is_active'),
            request_data={'auth_result': request.auth_result}
        )
        if c.is_active is None:
            c.is_active = True
        c.image_upload = ImageUpload.from_files(files, required=True)
        return c

    @classmethod
    @utils_auth.require_platform_admin
    def init_request_delete(cls, request, advertisement_id):
        logger.info("init_request_delete ::: started")
        c = cls.init_get_by_id(advertisement_id)
        c.request_data = {'auth_result': request.auth_result}
        return c

    @utils_app.log_start_finish
    def endpoint_get_all(self) -> Response:
        return Response(status_code=http200, body=[ad._to_ui() for ad in Advertisement.get_all()])

    @utils_app.log_start_finish
    def endpoint_create(self) -> Response:
        with ImageUpload.cleanup_on_error(self.image_upload):
            self.image_url = self.image_upload.store()
            self._create_db_record()
        return Response(status_code=http201, body=self._to_ui())

    @utils_app.log_start_finish
    def endpoint_delete(self) -> Response:
        delete_image(self.image_url)
        self._delete_db_record()
        return Response(status_code=http200, body={'message': 'Advertisement deleted successfully'})

    # Public endpoint

    @staticmethod
    @utils_app.log_start_finish
    def endpoint_get_public(user_id: str) -> Response:
        targeted = Attr('is_active').eq(True) & Attr('target_user_ids').contains(user_id)
        advertisements = [ad._to_ui() for ad in Advertisement.get_all(targeted)]
        logger.info(f'endpoint_get_public ::: {user_id=} is targeted by {len(advertisements)} advertisements')
        return Response(status_code=http200, body=advertisements)

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(advertisement_id=self.id_)

    def _to_dict(self) -> Dict:
        return {
            'id_': self.id_,
            'title': self.title,
            'image_url': self.image_url,
            'target_user_ids': self.target_user_ids,
            'is_active': self.is_active,
            'created_by': self.created_by,
            'date_created': self.date_created
        }
