from decimal import Decimal
from typing import Dict

from boto3.dynamodb.conditions import Attr
from chalice import Response

from chalicelib.base_class_entity import OwnedEntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.status_codes import http200
from chalicelib.menu_items import non_empty_str
from chalicelib.utils import app as utils_app, data as utils_data, exceptions
from chalicelib.utils.logger import logger


class Promotion(OwnedEntityBase):
    pk = keys_structure.promotions_pk
    sk = keys_structure.promotions_sk
    sk_id_name = 'promotion_id'
    entity_title = 'Promotion'

    required_fields = ('title', 'description')

    required_immutable_fields_validation = {
        'id_': lambda x: isinstance(x, str),
        'owner_id': lambda x: isinstance(x, str),
        'date_created': lambda x: isinstance(x, str)
    }

    required_mutable_fields_validation = {
        'title': non_empty_str,
        'description': non_empty_str,
        'start_date': lambda x: isinstance(x, str),
        'is_active': lambda x: isinstance(x, bool),
        'date_updated': lambda x: isinstance(x, str)
    }

    optional_fields_validation = {
        'end_date': lambda x: isinstance(x, str),
        'discount_percentage': lambda x: isinstance(x, Decimal) and 0 <= x <= 100,
        'image_url': lambda x: isinstance(x, str)
    }

    deletable_fields = ('end_date', 'discount_percentage')

    def __init__(self, id_, owner_id, **kwargs):
        OwnedEntityBase.__init__(self, id_, owner_id, **kwargs)

        self.title: str = kwargs.get('title')
        self.description: str = kwargs.get('description')
        self.discount_percentage: Decimal = kwargs.get('discount_percentage')
        self.start_date: str = kwargs.get('start_date') or self.date_created
        self.end_date: str = kwargs.get('end_date')
        self.is_active: bool = kwargs.get('is_active', True)
        self.record_type = 'promotion'

    def _apply_fields(self, fields: Dict, is_new: bool) -> None:
        for key in ('title', 'description'):
            if key in fields:
                value = fields[key]
                setattr(self, key, value.strip() if isinstance(value, str) else value)
        if 'discount_percentage' in fields:
            self.discount_percentage = utils_data.to_price(fields['discount_percentage'], 'discount_percentage')
            if self.discount_percentage is None and not is_new:
                self.discount_percentage = ''
        if fields.get('start_date') not in (None, ''):
            self.start_date = utils_data.to_iso_datetime(fields['start_date'], 'start_date')
        if 'end_date' in fields:
            self.end_date = utils_data.to_iso_datetime(fields['end_date'], 'end_date')
            # an empty end_date on update removes it
            if self.end_date is None and not is_new:
                self.end_date = ''
        if 'is_active' in fields:
            self.is_active = utils_data.to_bool(fields['is_active'], 'is_active')
        if self.is_active is None:
            self.is_active = True
        if self.end_date and self.end_date <= self.start_date:
            raise exceptions.ValidationException('Field end_date must be later than start_date')

    @classmethod
    @utils_app.log_start_finish
    def endpoint_get_public(cls, user_id: str) -> Response:
        """
        Currently valid promotions of the user, no authentication.
        Unknown users simply have none
        """
        currently_valid = Attr('is_active').eq(True) & (
            Attr('end_date').not_exists() | Attr('end_date').gt(utils_data.now_iso())
        )
        promotions = [promotion._to_ui() for promotion in cls.list_by_owner(user_id, currently_valid)]
        logger.info(f'endpoint_get_public ::: {user_id=} has {len(promotions)} valid promotions')
        return Response(status_code=http200, body=promotions)

    def _to_dict(self):
        return {
            'id_': self.id_,
            'owner_id': self.owner_id,
            'title': self.title,
            'description': self.description,
            'discount_percentage': self.discount_percentage,
            'start_date': self.start_date,
            'end_date': self.end_date,
            'is_active': self.is_active,
            'image_url': self.image_url,
            'date_created': self.date_created,
            'date_updated': self.date_updated
        }
