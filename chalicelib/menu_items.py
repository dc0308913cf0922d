from decimal import Decimal
from typing import Dict

from chalicelib.base_class_entity import OwnedEntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import MENU_ITEM_CATEGORIES
from chalicelib.utils import data as utils_data, exceptions


def non_empty_str(x) -> bool:
    return isinstance(x, str) and x.strip() != ''


class MenuItem(OwnedEntityBase):
    pk = keys_structure.menu_items_pk
    sk = keys_structure.menu_items_sk
    sk_id_name = 'menu_item_id'
    entity_title = 'Menu item'

    required_fields = ('name_', 'description', 'price', 'category')

    required_immutable_fields_validation = {
        'id_': lambda x: isinstance(x, str),
        'owner_id': lambda x: isinstance(x, str),
        'date_created': lambda x: isinstance(x, str)
    }

    required_mutable_fields_validation = {
        'name_': non_empty_str,
        'description': non_empty_str,
        'price': lambda x: isinstance(x, Decimal) and x >= 0,
        'category': lambda x: x in MENU_ITEM_CATEGORIES,
        'is_available': lambda x: isinstance(x, bool),
        'date_updated': lambda x: isinstance(x, str)
    }

    optional_fields_validation = {
        'image_url': lambda x: isinstance(x, str)
    }

    def __init__(self, id_, owner_id, **kwargs):
        OwnedEntityBase.__init__(self, id_, owner_id, **kwargs)

        self.name: str = kwargs.get('name_')
        self.description: str = kwargs.get('description')
        self.price: Decimal = kwargs.get('price')
        self.category: str = kwargs.get('category')
        self.is_available: bool = kwargs.get('is_available', True)
        self.record_type = 'menu_item'

    def _apply_fields(self, fields: Dict, is_new: bool) -> None:
        """
        Form values arrive as text: price is parsed to Decimal, is_available to bool,
        category is lower-cased and checked against the enum on save
        """
        for key in ('name', 'description'):
            if key in fields:
                value = fields[key]
                setattr(self, key, value.strip() if isinstance(value, str) else value)
        if 'price' in fields:
            price = utils_data.to_price(fields['price'])
            if price is None and not is_new:
                raise exceptions.ValidationException('Field price must be a number')
            self.price = price
        if 'category' in fields:
            category = fields['category']
            self.category = category.strip().lower() if isinstance(category, str) else category
        if 'is_available' in fields:
            self.is_available = utils_data.to_bool(fields['is_available'], 'is_available')
        if self.is_available is None:
            self.is_available = True

    def _to_dict(self):
        return {
            'id_': self.id_,
            'owner_id': self.owner_id,
            'name_': self.name,
            'description': self.description,
            'price': self.price,
            'category': self.category,
            'is_available': self.is_available,
            'image_url': self.image_url,
            'date_created': self.date_created,
            'date_updated': self.date_updated
        }
