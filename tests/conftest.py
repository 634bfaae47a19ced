import os

# Must be set before spendwise.core.config is imported.
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"
os.environ["DYNAMO_REGION"] = "eu-west-1"
os.environ["DYNAMO_CREATE_TABLES"] = "false"
os.environ["INSIGHT_REAPER_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = ""

from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from moto import mock_aws  # noqa: E402

from spendwise.db import dynamo  # noqa: E402


class FakeClock:
    """Settable clock for code that takes ``clock=``."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 20, 12, 0, 0))


@pytest.fixture
def dynamodb_tables():
    """Mocked DynamoDB with every application table created."""
    with mock_aws():
        dynamo.get_dynamodb.cache_clear()
        dynamo.ensure_tables()
        yield dynamo.get_dynamodb()
        dynamo.get_dynamodb.cache_clear()
