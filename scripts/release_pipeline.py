#!/usr/bin/env python3
"""Re-run a site's delivery pipeline, e.g. after a failed InvalidateCache stage."""

import argparse
import sys

import boto3


def release_pipeline(pipeline_name: str, region: str = "us-east-1") -> str:
  """Start a new execution of a pipeline.

  Args:
    pipeline_name: CodePipeline name (e.g., 'uow-cca-pipeline')
    region: AWS region

  Returns:
    The new pipeline execution ID
  """
  codepipeline = boto3.client("codepipeline", region_name=region)
  response = codepipeline.start_pipeline_execution(name=pipeline_name)
  return str(response["pipelineExecutionId"])


def main() -> None:
  """Main entry point."""
  parser = argparse.ArgumentParser(description="Re-run a static site delivery pipeline")
  parser.add_argument(
    "pipeline_name",
    help="CodePipeline name (see the PipelineName stack output)",
  )
  parser.add_argument(
    "--region",
    default="us-east-1",
    help="AWS region (default: us-east-1)",
  )
  args = parser.parse_args()

  try:
    execution_id = release_pipeline(args.pipeline_name, args.region)
  except Exception as e:
    print(f"Error: {e}", file=sys.stderr)
    sys.exit(1)

  print(f"✓ Started {args.pipeline_name}")
  print(f"  Execution ID: {execution_id}")


if __name__ == "__main__":
  main()
