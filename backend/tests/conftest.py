"""
Shared fixtures.

FakeStore replaces the DynamoDB calls in guildquest.store with an
in-memory table set that enforces the same write conditions (unique
insert keys, expected attribute values, all-or-nothing batches), so the
review flow can be exercised end to end, including from several threads.
"""
import json
import os
import sys
import threading

import pytest

# Add src to path for import
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from guildquest import store  # noqa: E402
from guildquest.config import config  # noqa: E402
from guildquest.errors import ConditionFailed, StorageUnavailable  # noqa: E402
from guildquest.gamification import calculate_level  # noqa: E402
from guildquest.models import LEADERBOARD_PARTITION, GuildRole, SubmissionStatus  # noqa: E402


class FakeStore:
    """In-memory stand-in for guildquest.store reads and writes."""

    # Sort key of each GSI, for ordered queries
    SORT_KEYS = {'byPoints': 'questPoints'}

    def __init__(self):
        self.tables = {}
        self.lock = threading.RLock()
        self.unavailable_tables = set()
        self.write_count = 0

    @staticmethod
    def _key(key):
        return tuple(sorted(key.items()))

    def _table(self, table_name):
        return self.tables.setdefault(table_name, {})

    def _check_available(self, table_name):
        if table_name in self.unavailable_tables:
            raise StorageUnavailable(f"Storage unavailable on {table_name}")

    @staticmethod
    def _matches(item, filters):
        for name, value in (filters or {}).items():
            if value is None:
                if name in item:
                    return False
            elif item.get(name) != value:
                return False
        return True

    def put(self, table_name, item, key_names):
        """Seed an item directly, bypassing conditions."""
        key = self._key({k: item[k] for k in key_names})
        self._table(table_name)[key] = dict(item)

    def items(self, table_name):
        return [dict(item) for item in self._table(table_name).values()]

    def get(self, table_name, key, consistent=True):
        with self.lock:
            self._check_available(table_name)
            item = self._table(table_name).get(self._key(key))
            return dict(item) if item else None

    def query(self, table_name, key_name, key_value, index_name=None, filters=None,
              consistent=False, limit=None, scan_forward=True):
        with self.lock:
            self._check_available(table_name)
            items = [
                dict(item) for item in self._table(table_name).values()
                if item.get(key_name) == key_value and self._matches(item, filters)
            ]
        sort_key = self.SORT_KEYS.get(index_name)
        if sort_key:
            items.sort(key=lambda item: item.get(sort_key, 0), reverse=not scan_forward)
        return items[:limit] if limit else items

    def count(self, table_name, key_name, key_value, index_name=None, filters=None):
        return len(self.query(table_name, key_name, key_value, index_name=index_name, filters=filters))

    def scan(self, table_name, filters=None):
        with self.lock:
            self._check_available(table_name)
            return [dict(item) for item in self._table(table_name).values() if self._matches(item, filters)]

    def write(self, ops):
        with self.lock:
            for op in ops:
                self._check_available(op['table'])

            for idx, op in enumerate(ops):
                table = self._table(op['table'])
                if op['action'] == 'insert':
                    if self._key({k: op['item'][k] for k in op['key_names']}) in table:
                        raise ConditionFailed(idx, op['table'])
                else:
                    current = table.get(self._key(op['key']), {})
                    for attr, value in op['expected'].items():
                        if value is None and attr in current:
                            raise ConditionFailed(idx, op['table'])
                        if value is not None and current.get(attr) != value:
                            raise ConditionFailed(idx, op['table'])

            for op in ops:
                table = self._table(op['table'])
                if op['action'] == 'insert':
                    self.put(op['table'], op['item'], op['key_names'])
                else:
                    key = self._key(op['key'])
                    table[key] = {**table.get(key, dict(op['key'])), **op['changes']}
            self.write_count += 1


@pytest.fixture
def fake_store(monkeypatch):
    """Route guildquest.store reads and writes to an in-memory FakeStore."""
    fake = FakeStore()
    for name in ('get', 'query', 'count', 'scan', 'write'):
        monkeypatch.setattr(store, name, getattr(fake, name))
    return fake


@pytest.fixture
def seed_guild(fake_store):
    """Create a guild with `size` members: member-0 .. member-{size-1}."""
    def _seed(size=10, guild_id='guild-1', member_limit=50, roles=None):
        fake_store.put(config.GUILDS_TABLE, {
            'guildId': guild_id,
            'name': 'Fellowship',
            'privacy': 'public',
            'memberLimit': member_limit,
            'createdBy': 'member-0'
        }, ['guildId'])
        for idx in range(size):
            member_id = f'member-{idx}'
            fake_store.put(config.GUILD_MEMBERS_TABLE, {
                'guildId': guild_id,
                'memberId': member_id,
                'role': (roles or {}).get(member_id, GuildRole.MEMBER),
                'joinedAt': '2026-01-01T00:00:00+00:00'
            }, ['guildId', 'memberId'])
        return guild_id
    return _seed


@pytest.fixture
def seed_member(fake_store):
    def _seed(member_id='member-0', quest_points=0, username=None):
        fake_store.put(config.MEMBERS_TABLE, {
            'memberId': member_id,
            'username': username or member_id,
            'questPoints': quest_points,
            'level': calculate_level(quest_points),
            'board': LEADERBOARD_PARTITION
        }, ['memberId'])
    return _seed


@pytest.fixture
def review_setup(fake_store, seed_guild, seed_member):
    """
    A pending submission by member-0 in a guild of `guild_size` members.
    Returns the submission id.
    """
    def _setup(guild_size=10, member_points=80, reward_points=25, submission_id='sub-1'):
        guild_id = seed_guild(guild_size)
        seed_member('member-0', member_points)
        fake_store.put(config.SUBMISSIONS_TABLE, {
            'submissionId': submission_id,
            'questId': 'quest-1',
            'guildId': guild_id,
            'memberId': 'member-0',
            'proofText': 'Slew the dragon',
            'status': SubmissionStatus.PENDING,
            'approvalCount': 0,
            'rejectionCount': 0,
            'ratingCount': 0,
            'rewardPoints': reward_points,
            'submittedAt': '2026-01-02T00:00:00+00:00'
        }, ['submissionId'])
        return submission_id
    return _setup


@pytest.fixture
def api_event():
    """Build an API Gateway proxy event for the given caller."""
    def _event(sub='member-1', path=None, body=None, query=None, username=None):
        event = {
            'pathParameters': path,
            'queryStringParameters': query,
            'body': json.dumps(body) if body is not None else None,
        }
        if sub:
            claims = {'sub': sub}
            if username:
                claims['preferred_username'] = username
            event['requestContext'] = {'authorizer': {'claims': claims}}
        return event
    return _event
