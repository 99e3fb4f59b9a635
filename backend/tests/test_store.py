"""
Tests for the DynamoDB access layer, with the boto3 resource and client mocked.
"""
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from guildquest import store
from guildquest.errors import ConditionFailed, StorageUnavailable


def client_error(code, reasons=None):
    response = {'Error': {'Code': code, 'Message': code}}
    if reasons is not None:
        response['CancellationReasons'] = reasons
    return ClientError(response, 'TransactWriteItems')


@pytest.fixture
def mock_client():
    with patch('guildquest.store.client') as client:
        yield client


@pytest.fixture
def mock_table():
    with patch('guildquest.store.dynamodb') as dynamodb:
        table = MagicMock()
        dynamodb.Table.return_value = table
        yield table


class TestToRequest:
    """Translation of operation dicts into DynamoDB requests."""

    def test_insert_requires_new_key(self):
        kind, params = store.to_request(
            store.insert_op('ratings', {'submissionId': 's1', 'ratedBy': 'm1', 'verdict': 'approved'},
                            ['submissionId', 'ratedBy'])
        )

        assert kind == 'Put'
        assert params['ConditionExpression'] == 'attribute_not_exists(#k0) AND attribute_not_exists(#k1)'
        assert params['ExpressionAttributeNames'] == {'#k0': 'submissionId', '#k1': 'ratedBy'}
        assert params['Item']['verdict'] == {'S': 'approved'}

    def test_update_with_expected_values(self):
        kind, params = store.to_request(store.update_op(
            'submissions',
            {'submissionId': 's1'},
            {'status': 'completed', 'ratingCount': 5},
            expected={'status': 'pending', 'rewardedAt': None}
        ))

        assert kind == 'Update'
        assert params['UpdateExpression'] == 'SET #u0 = :u0, #u1 = :u1'
        assert params['ConditionExpression'] == '#c0 = :c0 AND attribute_not_exists(#c1)'
        assert params['ExpressionAttributeNames']['#c1'] == 'rewardedAt'
        assert params['ExpressionAttributeValues'][':u1'] == {'N': '5'}
        assert params['ExpressionAttributeValues'][':c0'] == {'S': 'pending'}

    def test_unconditional_update_has_no_condition(self):
        _, params = store.to_request(store.update_op('members', {'memberId': 'm1'}, {'level': 2}))
        assert 'ConditionExpression' not in params

    def test_floats_become_decimals(self):
        _, params = store.to_request(store.update_op('submissions', {'submissionId': 's1'}, {'rate': 80.5}))
        assert params['ExpressionAttributeValues'][':u0'] == {'N': '80.5'}


class TestWrite:
    """Error mapping of write()."""

    def test_single_op_uses_conditional_put(self, mock_client):
        store.write([store.insert_op('members', {'memberId': 'm1'}, ['memberId'])])

        mock_client.put_item.assert_called_once()
        mock_client.transact_write_items.assert_not_called()

    def test_several_ops_use_one_transaction(self, mock_client):
        store.write([
            store.insert_op('ratings', {'submissionId': 's1', 'ratedBy': 'm1'}, ['submissionId', 'ratedBy']),
            store.update_op('submissions', {'submissionId': 's1'}, {'ratingCount': 1}, {'ratingCount': 0}),
        ])

        items = mock_client.transact_write_items.call_args[1]['TransactItems']
        assert [list(item) for item in items] == [['Put'], ['Update']]

    def test_empty_batch_is_noop(self, mock_client):
        store.write([])
        mock_client.transact_write_items.assert_not_called()

    def test_conditional_check_failure(self, mock_client):
        mock_client.update_item.side_effect = client_error('ConditionalCheckFailedException')

        with pytest.raises(ConditionFailed) as exc_info:
            store.write([store.update_op('quests', {'questId': 'q1'}, {'status': 'archived'}, {'status': 'active'})])

        assert exc_info.value.index == 0
        assert exc_info.value.table_name == 'quests'

    def test_cancellation_reason_points_at_operation(self, mock_client):
        mock_client.transact_write_items.side_effect = client_error(
            'TransactionCanceledException',
            [{'Code': 'None'}, {'Code': 'ConditionalCheckFailed'}]
        )

        with pytest.raises(ConditionFailed) as exc_info:
            store.write([
                store.insert_op('ratings', {'submissionId': 's1', 'ratedBy': 'm1'}, ['submissionId', 'ratedBy']),
                store.update_op('submissions', {'submissionId': 's1'}, {'ratingCount': 1}, {'ratingCount': 0}),
            ])

        assert exc_info.value.index == 1
        assert exc_info.value.table_name == 'submissions'

    def test_throttled_transaction_is_unavailable(self, mock_client):
        mock_client.transact_write_items.side_effect = client_error(
            'TransactionCanceledException',
            [{'Code': 'ThrottlingError'}, {'Code': 'None'}]
        )

        with pytest.raises(StorageUnavailable):
            store.write([
                store.insert_op('ratings', {'submissionId': 's1', 'ratedBy': 'm1'}, ['submissionId', 'ratedBy']),
                store.update_op('submissions', {'submissionId': 's1'}, {'ratingCount': 1}),
            ])

    def test_network_failure_is_unavailable(self, mock_client):
        mock_client.put_item.side_effect = EndpointConnectionError(endpoint_url='https://dynamodb')

        with pytest.raises(StorageUnavailable):
            store.write([store.insert_op('members', {'memberId': 'm1'}, ['memberId'])])


class TestReads:
    """Reads through the resource API."""

    def test_get_returns_none_for_missing_item(self, mock_table):
        mock_table.get_item.return_value = {}
        assert store.get('members', {'memberId': 'm1'}) is None
        assert mock_table.get_item.call_args[1]['ConsistentRead'] is True

    def test_get_failure_is_unavailable(self, mock_table):
        mock_table.get_item.side_effect = client_error('ProvisionedThroughputExceededException')

        with pytest.raises(StorageUnavailable):
            store.get('members', {'memberId': 'm1'})

    def test_query_follows_pagination(self, mock_table):
        mock_table.query.side_effect = [
            {'Items': [{'ratedBy': 'm1'}], 'LastEvaluatedKey': {'ratedBy': 'm1'}},
            {'Items': [{'ratedBy': 'm2'}]},
        ]

        items = store.query('ratings', 'submissionId', 's1', consistent=True)

        assert [i['ratedBy'] for i in items] == ['m1', 'm2']
        second_call = mock_table.query.call_args_list[1][1]
        assert second_call['ExclusiveStartKey'] == {'ratedBy': 'm1'}
        assert second_call['ConsistentRead'] is True

    def test_index_query_is_never_consistent(self, mock_table):
        mock_table.query.return_value = {'Items': []}

        store.query('submissions', 'status', 'completed', index_name='byStatus', consistent=True)

        params = mock_table.query.call_args[1]
        assert params['IndexName'] == 'byStatus'
        assert 'ConsistentRead' not in params

    def test_query_respects_limit(self, mock_table):
        mock_table.query.return_value = {
            'Items': [{'memberId': str(i)} for i in range(5)],
            'LastEvaluatedKey': {'memberId': '4'}
        }

        items = store.query('members', 'board', 'global', limit=3)

        assert len(items) == 3
        assert mock_table.query.call_count == 1

    def test_count_sums_pages(self, mock_table):
        mock_table.query.side_effect = [
            {'Count': 3, 'LastEvaluatedKey': {'memberId': 'x'}},
            {'Count': Decimal('2')},
        ]

        assert store.count('group-members', 'guildId', 'g1') == 5
        assert mock_table.query.call_args[1]['Select'] == 'COUNT'
