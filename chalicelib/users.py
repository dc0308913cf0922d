import re
import uuid
from typing import Tuple, List, Dict

from boto3.dynamodb.conditions import Key, Attr
from chalice import Response

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import ROLE_STANDARD, ROLE_PLATFORM_ADMIN, ROLES
from chalicelib.constants.status_codes import http200, http201
from chalicelib.menu_items import MenuItem
from chalicelib.promotions import Promotion
from chalicelib.utils import auth as utils_auth, app as utils_app, db as utils_db, exceptions, \
    multipart as utils_multipart
from chalicelib.utils.data import now_iso
from chalicelib.utils.logger import logger

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


class User(EntityBase):
    pk = keys_structure.users_pk
    sk = keys_structure.users_sk

    required_fields = ('username', 'email', 'password_hash')

    required_immutable_fields_validation = {
        'id_': lambda x: isinstance(x, str),
        'username': lambda x: isinstance(x, str),
        'email': lambda x: isinstance(x, str) and EMAIL_PATTERN.match(x) is not None,
        'password_hash': lambda x: isinstance(x, str),
        'role': lambda x: x in ROLES,
        'date_created': lambda x: isinstance(x, str)
    }

    required_mutable_fields_validation = {
        'date_updated': lambda x: isinstance(x, str)
    }

    optional_fields_validation = {
        'restaurant_name': lambda x: isinstance(x, str)
    }

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_)

        self.username: str = kwargs.get('username')
        self.email: str = kwargs['email'].strip().lower() if isinstance(kwargs.get('email'), str) else None
        self.password_hash: str = kwargs.get('password_hash')
        self.role: str = kwargs.get('role') or ROLE_STANDARD
        self.restaurant_name: str = kwargs.get('restaurant_name')
        self.date_created: str = kwargs.get('date_created') or now_iso()
        self.date_updated: str = kwargs.get('date_updated') or self.date_created
        self.record_type = 'user'

    @classmethod
    def init_by_id(cls, id_):
        logger.info("init_by_id ::: started")
        c = cls(id_)
        try:
            c.__init__(**c._get_db_item())
        except exceptions.RecordNotFound:
            raise exceptions.RecordNotFound('User not found')
        return c

    @classmethod
    def init_new(cls, request_body: Dict, role: str = ROLE_STANDARD):
        """
        New user from a request body, the password is hashed right away and never kept
        """
        username = request_body.get('username')
        password = request_body.get('password')
        if not isinstance(username, str) or not username.strip() or not isinstance(password, str) or not password:
            raise exceptions.ValidationException('Fields username, email, password are required')
        if not isinstance(request_body.get('email'), str) or not request_body['email'].strip():
            raise exceptions.ValidationException('Fields username, email, password are required')
        restaurant_name = request_body.get('restaurant_name')
        return cls(
            id_=str(uuid.uuid4()),
            username=username.strip(),
            email=request_body['email'],
            password_hash=utils_auth.hash_password(password),
            role=role,
            restaurant_name=(restaurant_name.strip() or None) if isinstance(restaurant_name, str) else None
        )

    @staticmethod
    def find_by_email(email: str) -> List['User']:
        records = utils_db.query_items_paged(
            Key('partkey').eq(keys_structure.users_pk),
            filter_expression=Attr('email').eq(email.strip().lower())
        )
        return [User(**record) for record in records]

    @staticmethod
    def get_all() -> List['User']:
        records = utils_db.query_items_paged(Key('partkey').eq(keys_structure.users_pk))
        return sorted((User(**record) for record in records), key=lambda user: user.date_created)

    @staticmethod
    def platform_admin_exists() -> bool:
        records = utils_db.query_items_paged(
            Key('partkey').eq(keys_structure.users_pk),
            filter_expression=Attr('role').eq(ROLE_PLATFORM_ADMIN),
            projection_expression='sortkey'
        )
        return len(records) > 0

    def _check_unique(self):
        records = utils_db.query_items_paged(
            Key('partkey').eq(keys_structure.users_pk),
            filter_expression=Attr('email').eq(self.email) | Attr('username').eq(self.username),
            projection_expression='sortkey'
        )
        if records:
            logger.warning(f'_check_unique ::: {self.username=} or {self.email=} already taken')
            raise exceptions.ValidationException('User already exists')

    def create(self):
        self._check_unique()
        try:
            self._create_db_record()
        except exceptions.RecordAlreadyExists:
            raise exceptions.ValidationException('User already exists')

    def check_password(self, password) -> bool:
        return utils_auth.check_password(password, self.password_hash)

    def issue_token(self) -> str:
        return utils_auth.issue_token(
            user_id=self.id_,
            role=self.role,
            username=self.username,
            email=self.email,
            restaurant_name=self.restaurant_name
        )

    def delete_with_owned_records(self):
        """
        Owned menu items and promotions go first, then the user.
        Each delete is independent, a failure in the middle leaves the rest in place.
        """
        deleted_menu_items = MenuItem.delete_all_by_owner(self.id_)
        deleted_promotions = Promotion.delete_all_by_owner(self.id_)
        pk, sk = self._get_pk_sk()
        utils_db.delete_db_record({'partkey': pk, 'sortkey': sk})
        logger.info(f'delete_with_owned_records ::: user {self.id_} deleted with '
                    f'{deleted_menu_items} menu items and {deleted_promotions} promotions')

    # Platform admin endpoints

    @classmethod
    @utils_auth.require_platform_admin
    def init_request_platform_admin(cls, request, user_id=None):
        logger.info("init_request_platform_admin ::: started")
        c = cls.init_by_id(user_id) if user_id else cls(id_=None)
        fields, _ = utils_multipart.parse_request_data(request)
        c.request_data = {'auth_result': request.auth_result, 'body': fields}
        return c

    @utils_app.log_start_finish
    def endpoint_get_all(self) -> Response:
        users = [user._to_ui() for user in User.get_all()]
        return Response(status_code=http200, body=users)

    @utils_app.log_start_finish
    def endpoint_get_user(self) -> Response:
        return Response(status_code=http200, body=self._to_ui())

    @utils_app.log_start_finish
    def endpoint_create_user(self) -> Response:
        # users created by a platform admin are always standard, a role in the body is ignored
        user = User.init_new(self.request_data['body'], role=ROLE_STANDARD)
        user.create()
        return Response(status_code=http201, body={'message': 'User created successfully', 'user': user._to_ui()})

    @utils_app.log_start_finish
    def endpoint_delete_user(self) -> Response:
        if self.id_ == self.request_data['auth_result']['user_id']:
            raise exceptions.ValidationException('Platform admin cannot delete itself')
        self.delete_with_owned_records()
        return Response(status_code=http200, body={'message': 'User deleted successfully'})

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(user_id=self.id_)

    def _to_dict(self):
        return {
            'id_': self.id_,
            'username': self.username,
            'email': self.email,
            'password_hash': self.password_hash,
            'role': self.role,
            'restaurant_name': self.restaurant_name,
            'date_created': self.date_created,
            'date_updated': self.date_updated
        }

    def to_ui(self):
        return self._to_ui()
