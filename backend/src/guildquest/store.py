"""
DynamoDB access layer.

Reads go through the boto3 resource API. Writes are described as plain
operation dicts (insert_op / update_op) and executed by write(): a single
operation becomes a conditional put/update, several become one
transact_write_items call so they succeed or fail together.

Conditions are what make the review flow safe under concurrent raters:
an insert only succeeds if its key is new, an update only succeeds if
every attribute in `expected` still holds the given value (None meaning
the attribute must be absent).
"""
import boto3
from decimal import Decimal
from typing import List, Dict, Any, Optional
from boto3.dynamodb.conditions import Key, Attr
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError
from .config import config
from .errors import ConditionFailed, StorageUnavailable
from .logging import logger

dynamodb = boto3.resource('dynamodb', region_name=config.AWS_REGION)
client = boto3.client('dynamodb', region_name=config.AWS_REGION)

_serializer = TypeSerializer()


def _unavailable(table_name: str, action: str, error: Exception) -> StorageUnavailable:
    logger.error(f"Error during {action} on {table_name}: {error}")
    return StorageUnavailable(f"Storage unavailable during {action} on {table_name}")


def _filter_expression(filters: Optional[Dict[str, Any]]):
    """Build an AND of equality filters; a None value means 'attribute absent'."""
    expression = None
    for name, value in (filters or {}).items():
        condition = Attr(name).not_exists() if value is None else Attr(name).eq(value)
        expression = condition if expression is None else expression & condition
    return expression


# =============================================================================
# READS
# =============================================================================

def get(table_name: str, key: Dict[str, Any], consistent: bool = True) -> Optional[Dict[str, Any]]:
    """Get a single item, or None if it does not exist."""
    try:
        response = dynamodb.Table(table_name).get_item(Key=key, ConsistentRead=consistent)
    except (ClientError, BotoCoreError) as e:
        raise _unavailable(table_name, 'get', e) from e
    return response.get('Item')


def query(
    table_name: str,
    key_name: str,
    key_value: Any,
    index_name: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
    consistent: bool = False,
    limit: Optional[int] = None,
    scan_forward: bool = True
) -> List[Dict[str, Any]]:
    """
    Query a table or GSI by partition key, following pagination.

    Args:
        table_name: Name of the DynamoDB table
        key_name: Partition key attribute of the table or index
        key_value: Partition key value
        index_name: Optional GSI name
        filters: Optional equality filters applied after the key condition
        consistent: Strongly consistent read (base table only)
        limit: Max items to return
        scan_forward: True for ascending sort key order, False for descending

    Returns:
        List of items matching the query
    """
    table = dynamodb.Table(table_name)
    params = {
        'KeyConditionExpression': Key(key_name).eq(key_value),
        'ScanIndexForward': scan_forward
    }
    if index_name:
        params['IndexName'] = index_name
    elif consistent:
        params['ConsistentRead'] = True
    filter_expression = _filter_expression(filters)
    if filter_expression is not None:
        params['FilterExpression'] = filter_expression

    items = []
    try:
        while True:
            response = table.query(**params)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key or (limit and len(items) >= limit):
                break
            params['ExclusiveStartKey'] = last_key
    except (ClientError, BotoCoreError) as e:
        raise _unavailable(table_name, 'query', e) from e

    return items[:limit] if limit else items


def count(
    table_name: str,
    key_name: str,
    key_value: Any,
    index_name: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None
) -> int:
    """Count items for a partition key without fetching them."""
    table = dynamodb.Table(table_name)
    params = {
        'KeyConditionExpression': Key(key_name).eq(key_value),
        'Select': 'COUNT'
    }
    if index_name:
        params['IndexName'] = index_name
    filter_expression = _filter_expression(filters)
    if filter_expression is not None:
        params['FilterExpression'] = filter_expression

    total = 0
    try:
        while True:
            response = table.query(**params)
            total += response.get('Count', 0)
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return total
            params['ExclusiveStartKey'] = last_key
    except (ClientError, BotoCoreError) as e:
        raise _unavailable(table_name, 'count', e) from e


def scan(table_name: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """Scan a whole table. Only used for small tables such as guilds."""
    table = dynamodb.Table(table_name)
    params = {}
    filter_expression = _filter_expression(filters)
    if filter_expression is not None:
        params['FilterExpression'] = filter_expression

    items = []
    try:
        while True:
            response = table.scan(**params)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return items
            params['ExclusiveStartKey'] = last_key
    except (ClientError, BotoCoreError) as e:
        raise _unavailable(table_name, 'scan', e) from e


# =============================================================================
# WRITES
# =============================================================================

def insert_op(table_name: str, item: Dict[str, Any], key_names: List[str]) -> Dict[str, Any]:
    """Describe a put that only succeeds if no item with the same key exists."""
    return {
        'action': 'insert',
        'table': table_name,
        'item': item,
        'key_names': list(key_names)
    }


def update_op(
    table_name: str,
    key: Dict[str, Any],
    changes: Dict[str, Any],
    expected: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Describe a SET update guarded by the expected attribute values."""
    return {
        'action': 'update',
        'table': table_name,
        'key': key,
        'changes': changes,
        'expected': expected or {}
    }


def _serialize(value: Any) -> Dict[str, Any]:
    # DynamoDB numbers must be Decimal, never float
    if isinstance(value, float):
        value = Decimal(str(value))
    return _serializer.serialize(value)


def _condition(expected: Dict[str, Any], names: dict, values: dict) -> str:
    clauses = []
    for idx, (attr, value) in enumerate(expected.items()):
        names[f'#c{idx}'] = attr
        if value is None:
            clauses.append(f'attribute_not_exists(#c{idx})')
        else:
            values[f':c{idx}'] = _serialize(value)
            clauses.append(f'#c{idx} = :c{idx}')
    return ' AND '.join(clauses)


def to_request(op: Dict[str, Any]) -> tuple:
    """
    Translate an operation dict into a low-level DynamoDB request.

    Returns:
        tuple: ('Put' | 'Update', request params)
    """
    if op['action'] == 'insert':
        names = {f'#k{idx}': name for idx, name in enumerate(op['key_names'])}
        return 'Put', {
            'TableName': op['table'],
            'Item': {k: _serialize(v) for k, v in op['item'].items()},
            'ConditionExpression': ' AND '.join(f'attribute_not_exists({alias})' for alias in names),
            'ExpressionAttributeNames': names
        }

    if op['action'] == 'update':
        names, values = {}, {}
        assignments = []
        for idx, (attr, value) in enumerate(op['changes'].items()):
            names[f'#u{idx}'] = attr
            values[f':u{idx}'] = _serialize(value)
            assignments.append(f'#u{idx} = :u{idx}')
        params = {
            'TableName': op['table'],
            'Key': {k: _serialize(v) for k, v in op['key'].items()},
            'UpdateExpression': 'SET ' + ', '.join(assignments),
            'ExpressionAttributeNames': names,
            'ExpressionAttributeValues': values
        }
        condition = _condition(op['expected'], names, values)
        if condition:
            params['ConditionExpression'] = condition
        return 'Update', params

    raise ValueError(f"Unknown write action: {op['action']}")


def write(ops: List[Dict[str, Any]]) -> None:
    """
    Execute write operations atomically.

    Raises:
        ConditionFailed: a condition was refused; .index points at the operation
        StorageUnavailable: any other storage failure (throttling, network, ...)
    """
    if not ops:
        return

    requests = [to_request(op) for op in ops]
    tables = ', '.join(sorted({op['table'] for op in ops}))

    try:
        if len(requests) == 1:
            kind, params = requests[0]
            if kind == 'Put':
                client.put_item(**params)
            else:
                client.update_item(**params)
        else:
            client.transact_write_items(
                TransactItems=[{kind: params} for kind, params in requests]
            )
    except ClientError as e:
        error_code = e.response['Error']['Code']
        if error_code == 'ConditionalCheckFailedException':
            raise ConditionFailed(0, ops[0]['table']) from e
        if error_code == 'TransactionCanceledException':
            # Cancellation reasons correspond to the TransactItems list order
            reasons = e.response.get('CancellationReasons') or []
            for idx, reason in enumerate(reasons):
                if reason.get('Code') == 'ConditionalCheckFailed':
                    raise ConditionFailed(idx, ops[idx]['table']) from e
        raise _unavailable(tables, 'write', e) from e
    except BotoCoreError as e:
        raise _unavailable(tables, 'write', e) from e
