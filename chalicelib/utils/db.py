import functools
import os
from typing import Dict, List, Optional

from botocore.exceptions import ClientError

from chalicelib.constants import substitute_keys
from chalicelib.utils import data
from chalicelib.utils import exceptions
from chalicelib.utils.boto_clients import dynamodb_resource
from chalicelib.utils.logger import logger, log_exception

CONDITIONAL_CHECK_FAILED = 'ConditionalCheckFailedException'


def db_operation(func):
    """
        should be used for any atomic
        get/put/update/delete/query in the code
        translates botocore errors into StoreException, nothing is retried
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug(f'{func.__name__}:: started')
        try:
            result = func(*args, **kwargs)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == CONDITIONAL_CHECK_FAILED:
                raise exceptions.RecordAlreadyExists(f'{func.__name__}:: condition check failed')
            log_exception(e, msg=f'Got exception while trying to {func.__name__}: ')
            raise exceptions.StoreException(f'Store operation {func.__name__} failed')
        logger.info(f'{func.__name__}:: SUCCESS')
        return result

    return wrapper


def get_table(table_name: str):
    return dynamodb_resource().Table(table_name)


def get_gen_table():
    return get_table(os.environ['GEN_TABLE_NAME'])


@db_operation
def put_db_record(item: dict, condition_expression=None, table=get_gen_table):
    kwargs = {'Item': item}
    if condition_expression is not None:
        kwargs['ConditionExpression'] = condition_expression
    table().put_item(**kwargs)


@db_operation
def delete_db_record(key: dict, table=get_gen_table):
    table().delete_item(Key=key)


@db_operation
def update_db_record(key: dict, update_body: dict, allowed_attrs_to_update: list,
                     allowed_attrs_to_delete: list, table=get_gen_table):
    data.substitute_keys(dict_to_process=update_body, base_keys=substitute_keys.to_db)
    set_expr, set_names, expr_attr_values, remove_expr, remove_names = generate_update_expression(
        update_body=update_body,
        allowed_attrs_to_update=allowed_attrs_to_update,
        allowed_attrs_to_delete=allowed_attrs_to_delete
    )
    update_item_dict = {"Key": key, "ReturnValues": "ALL_NEW"}

    set_response = None
    if set_expr:
        set_item_dict = {
            **update_item_dict,
            "UpdateExpression": set_expr,
            "ExpressionAttributeNames": set_names,
            "ExpressionAttributeValues": expr_attr_values
        }
        set_response = table().update_item(**set_item_dict)

    remove_response = None
    if remove_expr:
        remove_item_dict = {
            **update_item_dict,
            "UpdateExpression": remove_expr,
            "ExpressionAttributeNames": remove_names
        }
        remove_response = table().update_item(**remove_item_dict)

    return set_response, remove_response


def generate_update_expression(update_body: dict, allowed_attrs_to_update: list, allowed_attrs_to_delete: list):
    """
    Generate expressions to update and delete attributes.
    if a key of update_body is empty - the attribute is deleted, else - attribute is updated
    Attribute names always go through ExpressionAttributeNames (name, description etc. are reserved words)
    """
    expr_attr_values = {}
    set_names = {}
    remove_names = {}
    for field in allowed_attrs_to_update:
        field_value = update_body.get(field, None)
        if field_value is None:
            continue
        # if field is in update_body but is equal to empty string, list etc. - delete field
        if field_value in ['', [], {}] and field in allowed_attrs_to_delete:
            remove_names[f'#{field}'] = field
        else:
            set_names[f'#{field}'] = field
            expr_attr_values[f':{field}'] = field_value

    set_expr = f'SET {", ".join(f"{name}=:{field}" for name, field in set_names.items())}' if set_names else None
    remove_expr = f'REMOVE {", ".join(remove_names)}' if remove_names else None
    return set_expr, set_names, expr_attr_values, remove_expr, remove_names


@db_operation
def get_db_item(partkey, sortkey, table=get_gen_table) -> Dict:
    result = table().get_item(
        Key={
            'partkey': partkey,
            'sortkey': sortkey
        }
    )

    if 'Item' in result:
        return result['Item']
    else:
        logger.info(f"get_db_item ::: record partkey={partkey} sortkey={sortkey} not found")
        raise exceptions.RecordNotFound(f'record partkey={partkey} sortkey={sortkey} not found')


@db_operation
def query_items_paginated(
        key_condition_expression,
        filter_expression=None,
        projection_expression=None,
        table=get_gen_table,
        index_name=None,
        expr_attr_names=None,
        limit=None,
        start_key=None
):
    kwargs = {'KeyConditionExpression': key_condition_expression}
    if filter_expression is not None:
        kwargs.update({'FilterExpression': filter_expression})

    if projection_expression:
        kwargs.update({'ProjectionExpression': projection_expression})

    if expr_attr_names:
        kwargs.update({'ExpressionAttributeNames': expr_attr_names})

    if limit:
        kwargs.update({'Limit': int(limit)})

    if index_name:
        kwargs.update({'IndexName': index_name})

    if start_key:
        kwargs.update({'ExclusiveStartKey': start_key})

    resp = table().query(**kwargs)
    return resp['Items'], resp.get('LastEvaluatedKey')


def query_items_paged(key_condition_expression, filter_expression=None, projection_expression=None,
                      table=get_gen_table, index_name=None, expr_attr_names=None) -> List[Dict]:
    """ This method shall be used whenever you think the query will
        return more than 1mb of data at once"""
    all_items = []
    last_evaluated_key: Optional[Dict] = None
    while True:
        items, last_evaluated_key = query_items_paginated(
            key_condition_expression,
            filter_expression=filter_expression,
            projection_expression=projection_expression,
            table=table,
            index_name=index_name,
            expr_attr_names=expr_attr_names,
            start_key=last_evaluated_key
        )
        all_items.extend(items)
        if last_evaluated_key is None:
            return all_items
