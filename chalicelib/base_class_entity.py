from typing import Tuple, Dict, List, Optional
from uuid import uuid4

from boto3.dynamodb.conditions import Attr, Key
from chalice import Response

from chalicelib.constants import keys_structure
from chalicelib.constants.status_codes import http200, http201
from chalicelib.constants.substitute_keys import from_db
from chalicelib.images import ImageUpload, delete_image
from chalicelib.utils import auth as utils_auth, app as utils_app, db as utils_db, exceptions
from chalicelib.utils.auth import is_platform_admin
from chalicelib.utils.multipart import parse_request_data
from chalicelib.utils.data import substitute_keys, now_iso
from chalicelib.utils.logger import logger


class EntityBase:
    pk = None
    sk = None

    required_fields: Tuple[str, ...] = ()
    required_immutable_fields_validation = {}
    required_mutable_fields_validation = {}
    optional_fields_validation = {}
    # optional fields which may be removed from the record by an update
    deletable_fields: Tuple[str, ...] = ()

    def __init__(self, id_):
        self.id_: str = id_
        self.record_type: str = ''
        self.request_data: Optional[Dict] = None
        self.db_record: Dict = {}

    def _get_pk_sk(self) -> Tuple[str, str]:
        """
        Should be re-implemented in each child class
        :return:
        partkey, sortkey of db item for child
        """
        return self.pk, self.sk

    def _get_db_item(self) -> Dict:
        return utils_db.get_db_item(*self._get_pk_sk())

    def _to_dict(self) -> Dict:
        """
        Should be re-implemented in each child class
        :return:
        dict of item's attributes
        """
        return {
            'id_': self.id_,
            'record_type': self.record_type
        }

    def _init_db_record(self) -> None:
        """
        New DB record initialization
        :return:
        None
        """
        pk, sk = self._get_pk_sk()
        self.db_record = {
            'partkey': pk,
            'sortkey': sk,
            'record_type': self.record_type,
            **{key: value for key, value in self._to_dict().items() if value is not None}
        }

    @staticmethod
    def raise_validation_error(key):
        message = f'Validation error occurred while validating field={key}'
        logger.error(f"raise_validation_error ::: {message}")
        raise exceptions.ValidationException(message)

    def _validate_required_fields(self):
        """
        Raise ValidationException listing every required field which is missing
        """
        missing = [key for key in self.required_fields if self.db_record.get(key) in (None, '')]
        if missing:
            names = ', '.join(key.rstrip('_') for key in self.required_fields)
            logger.warning(f'_validate_required_fields ::: {self.record_type=} {missing=}')
            raise exceptions.ValidationException(f'Fields {names} are required')

    def _validate_mandatory_fields(self):
        """
        Validates mandatory fields if all fields have correct type to put to db
        Raise ValidationException in case if a field is not valid
        :return:
        None
        """
        self._validate_required_fields()
        for key, validator_func in {
            **self.required_immutable_fields_validation,
            **self.required_mutable_fields_validation
        }.items():
            if validator_func(self.db_record.get(key)) is False:
                self.raise_validation_error(key)

    def _validate_optional_fields(self):
        """
        Validates optional fields if all fields have correct type to put to db
        Raise ValidationException in case if a field is not valid
        :return:
        None
        """
        for key, validator_func in self.optional_fields_validation.items():
            if self.db_record.get(key) is not None and validator_func(self.db_record.get(key)) is False:
                self.raise_validation_error(key)

    def _get_validated_update_dict(self) -> Dict:
        """
        Validates fields for update
        Raise ValidationException if a provided field is not valid
        :return:
        Clean dict for update
        (fields which were not provided are excluded)
        """
        update_dict = self._to_dict()
        clean_dict = {}
        validation_dict = {**self.required_mutable_fields_validation, **self.optional_fields_validation}
        for key, value in update_dict.items():
            if key not in validation_dict or value is None:
                continue
            if value == '' and key in self.deletable_fields:
                clean_dict[key] = value
            elif validation_dict[key](value) is True:
                clean_dict[key] = value
            else:
                self.raise_validation_error(key)
        return clean_dict

    def _validate_new_record(self) -> None:
        self._init_db_record()
        self._validate_mandatory_fields()
        self._validate_optional_fields()

    def _create_db_record(self) -> None:
        """
        Creates entity db record
        :return:
        None
        """
        self._validate_new_record()
        utils_db.put_db_record(self.db_record, condition_expression=Attr('partkey').not_exists())
        logger.info(f"_create_db_record ::: {self.record_type=} {self.id_=} {self.db_record.get('partkey')=} "
                    f"{self.db_record.get('sortkey')=} successfully created")

    def _update_fields_whitelist(self) -> List:
        return [*self.required_mutable_fields_validation.keys(), *self.optional_fields_validation.keys()]

    def _update_db_record(self):
        """
        Updates entity db record
        :return:
        None
        """
        pk, sk = self._get_pk_sk()
        self.date_updated = now_iso()
        update_dict = self._get_validated_update_dict()
        utils_db.update_db_record(
            key={'partkey': pk, 'sortkey': sk},
            update_body=update_dict,
            allowed_attrs_to_update=self._update_fields_whitelist(),
            allowed_attrs_to_delete=list(self.deletable_fields)
        )
        logger.info(f"_update_db_record ::: {self.record_type=} "
                    f"{self.id_=} {pk=} {sk=} successfully updated")

    def _delete_db_record(self):
        pk, sk = self._get_pk_sk()
        utils_db.delete_db_record({'partkey': pk, 'sortkey': sk})
        logger.info(f"_delete_db_record ::: {self.record_type=} {self.id_=} {pk=} {sk=} successfully deleted")

    def _to_ui(self) -> Dict:
        item = self._to_dict()
        substitute_keys(dict_to_process=item, base_keys=from_db)
        return item


def ensure_user_exists(user_id: str) -> None:
    try:
        utils_db.get_db_item(keys_structure.users_pk, keys_structure.users_sk.format(user_id=user_id))
    except exceptions.RecordNotFound:
        raise exceptions.RecordNotFound('User not found')


class OwnedEntityBase(EntityBase):
    """
    Records which belong to exactly one user (owner_id), with an optional image.
    Only the owner or a platform admin may change or delete them.

    Child classes set pk, sk, sk_id_name, entity_title and implement
    _apply_fields(fields, is_new) which coerces form/JSON values into attributes.
    """
    sk_id_name: str = ''
    entity_title: str = ''

    def __init__(self, id_, owner_id, **kwargs):
        EntityBase.__init__(self, id_)
        self.request_data = kwargs.get('request_data') or {}
        self.owner_id: str = owner_id
        self.image_url: Optional[str] = kwargs.get('image_url')
        self.date_created: str = kwargs.get('date_created') or now_iso()
        self.date_updated: str = kwargs.get('date_updated') or self.date_created
        self.image_upload: Optional[ImageUpload] = None

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(**{self.sk_id_name: self.id_})

    def _apply_fields(self, fields: Dict, is_new: bool) -> None:
        raise NotImplementedError

    @classmethod
    def init_get_by_id(cls, id_):
        c = cls(id_=id_, owner_id=None)
        try:
            c.__init__(**c._get_db_item())
        except exceptions.RecordNotFound:
            raise exceptions.RecordNotFound(f'{cls.entity_title} not found')
        return c

    @classmethod
    def init_new(cls, owner_id: str, fields: Dict, image_upload: Optional[ImageUpload]):
        c = cls(id_=str(uuid4()), owner_id=owner_id)
        c._apply_fields(fields, is_new=True)
        c.image_upload = image_upload
        return c

    @classmethod
    def list_by_owner(cls, owner_id, filter_expression=None) -> List['OwnedEntityBase']:
        owner_filter = Attr('owner_id').eq(owner_id)
        if filter_expression is not None:
            owner_filter = owner_filter & filter_expression
        records: List[Dict] = utils_db.query_items_paged(Key('partkey').eq(cls.pk), filter_expression=owner_filter)
        return sorted((cls(**record) for record in records), key=lambda item: item.date_created)

    @classmethod
    def delete_all_by_owner(cls, owner_id) -> int:
        items = cls.list_by_owner(owner_id)
        for item in items:
            item.delete()
        logger.info(f'delete_all_by_owner ::: {cls.__name__} {owner_id=} deleted {len(items)} records')
        return len(items)

    @classmethod
    def _list_response(cls, owner_id) -> Response:
        items = [item._to_ui() for item in cls.list_by_owner(owner_id)]
        logger.info(f'_list_response ::: returning {cls.__name__} ids={[item["id"] for item in items]}')
        return Response(status_code=http200, body=items)

    # Request initialization, owner scoped

    @classmethod
    @utils_auth.authenticate_class
    def endpoint_get_own(cls, request) -> Response:
        return cls._list_response(request.auth_result['user_id'])

    @classmethod
    @utils_auth.authenticate_class
    def init_request_create(cls, request):
        logger.info(f"{cls.__name__}.init_request_create ::: started")
        fields, files = parse_request_data(request)
        image_upload = ImageUpload.from_files(files)
        return cls.init_new(request.auth_result['user_id'], fields, image_upload)

    @classmethod
    @utils_auth.authenticate_class
    def init_request_by_id(cls, request, id_):
        logger.info(f"{cls.__name__}.init_request_by_id ::: started")
        c = cls.init_get_by_id(id_)
        c.check_can_manage(request.auth_result['user_id'])
        c.request_data = {'auth_result': request.auth_result}
        return c

    # Request initialization, platform admin acting for any user

    @classmethod
    @utils_auth.require_platform_admin
    def endpoint_get_for_user(cls, request, user_id) -> Response:
        ensure_user_exists(user_id)
        return cls._list_response(user_id)

    @classmethod
    @utils_auth.require_platform_admin
    def init_request_create_for_user(cls, request, user_id):
        logger.info(f"{cls.__name__}.init_request_create_for_user ::: started")
        fields, files = parse_request_data(request)
        image_upload = ImageUpload.from_files(files)
        ensure_user_exists(user_id)
        return cls.init_new(user_id, fields, image_upload)

    @classmethod
    @utils_auth.require_platform_admin
    def init_request_by_id_platform_admin(cls, request, id_):
        logger.info(f"{cls.__name__}.init_request_by_id_platform_admin ::: started")
        c = cls.init_get_by_id(id_)
        c.request_data = {'auth_result': request.auth_result}
        return c

    def with_request_changes(self, request):
        """ Pending update from the request body, applied by endpoint_update """
        fields, files = parse_request_data(request)
        self.image_upload = ImageUpload.from_files(files)
        self._apply_fields(fields, is_new=False)
        return self

    def check_can_manage(self, requester_id: str) -> None:
        if self.owner_id == requester_id:
            return
        if is_platform_admin(requester_id):
            logger.info(f'check_can_manage ::: platform admin {requester_id=} acting on {self.owner_id=}')
            return
        logger.warning(f'check_can_manage ::: {requester_id=} is not the owner of {self.record_type} {self.id_}')
        raise exceptions.AccessDenied('User not authorized')

    # Endpoints

    @utils_app.log_start_finish
    def endpoint_create(self) -> Response:
        self._validate_new_record()
        with ImageUpload.cleanup_on_error(self.image_upload):
            if self.image_upload is not None:
                self.image_url = self.image_upload.store()
            self._create_db_record()
        return Response(status_code=http201, body=self._to_ui())

    @utils_app.log_start_finish
    def endpoint_update(self) -> Response:
        previous_image_url = self.image_url
        self._get_validated_update_dict()
        with ImageUpload.cleanup_on_error(self.image_upload):
            if self.image_upload is not None:
                self.image_url = self.image_upload.store()
            self._update_db_record()
        for field in self.deletable_fields:
            if getattr(self, field, None) == '':
                setattr(self, field, None)
        if self.image_upload is not None and previous_image_url:
            delete_image(previous_image_url)
        return Response(status_code=http200, body=self._to_ui())

    @utils_app.log_start_finish
    def endpoint_delete(self) -> Response:
        self.delete()
        return Response(status_code=http200, body={'message': f'{self.entity_title} deleted successfully'})

    def delete(self) -> None:
        """ Image file first, then the record """
        if self.image_url:
            delete_image(self.image_url)
        self._delete_db_record()
