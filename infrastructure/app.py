#!/usr/bin/env python3
"""CDK application entry point for static site pipelines."""

import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

import aws_cdk as cdk
import boto3

from infrastructure.config import Config, ConfigError
from infrastructure.stacks.site_stack import StaticSitePipelineStack


def get_account_id() -> str:
  """Get AWS account ID from current credentials."""
  sts = boto3.client("sts")
  return str(sts.get_caller_identity()["Account"])


def main() -> None:
  """Create CDK app with a stack for each configured site."""
  app = cdk.App()

  # Load configuration
  config_path = app.node.try_get_context("config") or "sites.yaml"
  try:
    config = Config.from_yaml(Path(config_path))
  except ConfigError as e:
    print(f"Invalid configuration in {config_path}: {e}", file=sys.stderr)
    sys.exit(1)

  # Get account ID from credentials
  account_id = get_account_id()

  for site in config.sites:
    StaticSitePipelineStack(
      app,
      f"StaticSitePipeline-{site.name}",
      site_config=site,
      env=cdk.Environment(
        account=account_id,
        region=site.region,
      ),
      description=f"Static website and delivery pipeline for {site.name}",
    )

  app.synth()


if __name__ == "__main__":
  main()
