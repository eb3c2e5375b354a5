"""Registry and FastAPI client fixtures."""
import pytest
from fastapi.testclient import TestClient

from file_manager.main import create_app
from file_manager.registry import FileRegistry
from file_manager.settings import Settings
from tests.consts import TEST_BUCKET_NAME, TEST_REGION


@pytest.fixture
def registry(store, fake_clock) -> FileRegistry:
    return FileRegistry(store)


@pytest.fixture
def settings(mocked_aws) -> Settings:
    return Settings(
        deployment_mode="aws-prod",
        s3_bucket_name=TEST_BUCKET_NAME,
        aws_region=TEST_REGION,
    )


@pytest.fixture
def client(settings, s3_client, fake_clock) -> TestClient:
    app = create_app(settings=settings, s3_client=s3_client)
    with TestClient(app) as client:
        yield client
