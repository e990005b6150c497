"""Lambda entry point for the pipeline's InvalidateCache stage."""

from typing import Any

import boto3
from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext

from notifier import CacheInvalidationNotifier, NotifierSettings

logger = Logger(service="cache-invalidation")

# Reused across warm invocations of the same container
_notifier: CacheInvalidationNotifier | None = None


class MalformedJobEventError(ValueError):
  """Raised when an event carries no CodePipeline job ID."""


def get_job_id(event: dict[str, Any]) -> str:
  """Extract the job ID from a CodePipeline job event."""
  try:
    job_id = event["CodePipeline.job"]["id"]
  except (KeyError, TypeError) as e:
    raise MalformedJobEventError("Event is not a CodePipeline job event") from e
  if not isinstance(job_id, str) or not job_id:
    raise MalformedJobEventError("CodePipeline job ID is empty")
  return job_id


def build_notifier(settings: NotifierSettings) -> CacheInvalidationNotifier:
  return CacheInvalidationNotifier(
    cloudfront=boto3.client("cloudfront"),
    codepipeline=boto3.client("codepipeline"),
    distribution_id=settings.distribution_id,
  )


def get_notifier() -> CacheInvalidationNotifier:
  global _notifier
  if _notifier is None:
    _notifier = build_notifier(NotifierSettings.from_env())
  return _notifier


@logger.inject_lambda_context(log_event=False)
def lambda_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
  job_id = get_job_id(event)
  logger.append_keys(job_id=job_id)

  outcome = get_notifier().invalidate(job_id)
  return outcome.to_dict()
