import json
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, List

from chalicelib.utils.exceptions import ValidationException

TRUE_VALUES = ('true', '1', 'yes', 'on')
FALSE_VALUES = ('false', '0', 'no', 'off')


def replace_dict_key(item, orig_key, new_key):
    if orig_key in item:
        if new_key not in item:
            item[new_key] = item[orig_key]
        del item[orig_key]


def substitute_keys(dict_to_process: dict, base_keys: dict, opt_dict=None):
    if opt_dict is None:
        opt_dict = {}
    all_keys = {**base_keys, **opt_dict}
    for key, val in all_keys.items():
        if val:
            replace_dict_key(dict_to_process, key, val)
        elif key in dict_to_process.keys():
            dict_to_process.pop(key, None)


def parse_raw_body(chalice_request):
    request_raw_body = chalice_request.raw_body
    if request_raw_body:
        try:
            item = json.loads(request_raw_body)
        except ValueError:
            raise ValidationException('Request body is not a valid JSON')
        if not isinstance(item, dict):
            raise ValidationException('Request body must be a JSON object')
        return fix_values_from_ui(item=item)
    else:
        return {}


def fix_values_from_ui(item):
    """
    Remove keys with empty or None values and transform float to Decimal
    """
    if item.get('_values_from_ui_strategy') == 'delete_empty':
        list_to_cleanup = ['', None]
    else:
        list_to_cleanup = [None]
    item = cleanup_dict(item, list_to_cleanup)
    item.pop('_values_from_ui_strategy', None)
    result = json.dumps(item)
    return json.loads(result, parse_float=Decimal)


def cleanup_dict(item: dict, list_of_values: list):
    """ Remove None fields in dict with. Supports one nesting.  """

    def sub_clean(sub_item):
        return {
            key: value
            for key, value in sub_item.items()
            if value not in list_of_values
        }

    clean = {}
    for k, v in item.items():
        if isinstance(v, dict):
            nested = sub_clean(v)
            if len(nested.keys()) > 0:
                clean[k] = nested
        elif v not in list_of_values:
            clean[k] = v
    return clean


# Form values arrive as text, JSON values arrive typed. Both end up here.

def to_bool(value: Any, field: str) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in TRUE_VALUES:
        return True
    if isinstance(value, str) and value.strip().lower() in FALSE_VALUES:
        return False
    raise ValidationException(f'Field {field} must be a boolean')


def to_price(value: Any, field: str = 'price') -> Optional[Decimal]:
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValidationException(f'Field {field} must be a number')
    try:
        price = Decimal(str(value).strip())
        if price.is_finite() and price >= 0:
            return price.quantize(Decimal('1.00'))
    except InvalidOperation:
        raise ValidationException(f'Field {field} must be a number')
    raise ValidationException(f'Field {field} must be a non-negative number')


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='seconds')


def to_iso_datetime(value: Any, field: str) -> Optional[str]:
    """
    Normalizes a date/datetime given as text into a UTC ISO string with seconds precision,
    naive values are treated as UTC
    """
    if value is None or value == '':
        return None
    if not isinstance(value, str):
        raise ValidationException(f'Field {field} must be an ISO date')
    try:
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        raise ValidationException(f'Field {field} must be an ISO date')
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat(timespec='seconds')


def to_str_list(value: Any, field: str) -> List[str]:
    """ Accepts a list or its JSON text representation (form fields) """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise ValidationException(f'Invalid {field} format')
    if not isinstance(value, list) or not all(isinstance(x, str) and x for x in value):
        raise ValidationException(f'Invalid {field} format')
    return list(dict.fromkeys(value))
