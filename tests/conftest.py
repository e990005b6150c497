"""Pytest fixtures for CDK construct and Lambda handler tests."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import aws_cdk as cdk
import pytest

from infrastructure.config import SiteConfig, SourceConfig

# Lambda sources are deployed flat, so import them the same way
LAMBDA_DIR = Path(__file__).parent.parent / "infrastructure" / "lambdas" / "cache_invalidation"
sys.path.insert(0, str(LAMBDA_DIR))


class FakeLambdaContext:
  function_name = "cache-invalidation"
  memory_limit_in_mb = 1024
  invoked_function_arn = "arn:aws:lambda:us-east-1:111111111111:function:cache-invalidation"
  aws_request_id = "req-123"


@pytest.fixture
def app() -> cdk.App:
  """Create a CDK App for testing."""
  return cdk.App()


@pytest.fixture
def stack(app: cdk.App) -> cdk.Stack:
  """Create a CDK Stack for testing."""
  return cdk.Stack(app, "TestStack", env=cdk.Environment(region="us-east-1"))


@pytest.fixture
def site_config() -> SiteConfig:
  """A minimal site configuration."""
  return SiteConfig(
    name="test-site",
    bucket_name="test-site-bucket",
    source=SourceConfig(owner="octo", repo="site"),
    notification_emails=["ops@example.com"],
  )


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
  return FakeLambdaContext()


@pytest.fixture
def cloudfront() -> MagicMock:
  """Fake CloudFront client that accepts every invalidation."""
  client = MagicMock()
  client.create_invalidation.return_value = {
    "Location": "https://cloudfront.amazonaws.com/2020-05-31/distribution/E1234ABCD/invalidation/I1",
    "Invalidation": {"Id": "I1", "Status": "InProgress"},
  }
  return client


@pytest.fixture
def codepipeline() -> MagicMock:
  """Fake CodePipeline client."""
  return MagicMock()
