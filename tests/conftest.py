from tests.fixtures.app_client import client, registry, settings  # noqa: F401
from tests.fixtures.mocked_aws import fake_clock, mocked_aws, s3_client, store  # noqa: F401
