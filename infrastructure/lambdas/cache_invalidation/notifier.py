"""CloudFront cache invalidation for a CodePipeline job.

The notifier issues one invalidation of every path on a distribution and
files exactly one success or failure result for the job that triggered it.
"""

import os
from dataclasses import dataclass
from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

logger = Logger(service="cache-invalidation", child=True)

INVALIDATION_PATHS = ["/*"]
FAILURE_TYPE = "JobFailed"

# CodePipeline rejects failure messages longer than this
MAX_FAILURE_MESSAGE_LENGTH = 5000


class InvalidDistributionError(ValueError):
  """Raised when no usable distribution ID is bound to the notifier."""


@dataclass(frozen=True)
class JobSucceeded:
  """The invalidation was accepted and the job was marked successful."""

  job_id: str
  invalidation_id: str | None = None

  def to_dict(self) -> dict[str, Any]:
    return {
      "jobId": self.job_id,
      "status": "succeeded",
      "invalidationId": self.invalidation_id,
    }


@dataclass(frozen=True)
class JobFailed:
  """The invalidation failed and the job was marked failed."""

  job_id: str
  message: str
  type: str = FAILURE_TYPE

  def to_dict(self) -> dict[str, Any]:
    return {
      "jobId": self.job_id,
      "status": "failed",
      "type": self.type,
      "message": self.message,
    }


JobOutcome = JobSucceeded | JobFailed


@dataclass(frozen=True)
class NotifierSettings:
  """Deploy-time settings read from the Lambda environment."""

  distribution_id: str

  @classmethod
  def from_env(cls) -> "NotifierSettings":
    """Read settings once per container.

    A missing DISTRIBUTION_ID is not raised here: it surfaces as a failed
    job so the pipeline stage still gets a result.
    """
    return cls(distribution_id=os.environ.get("DISTRIBUTION_ID", "").strip())


def failure_message(error: Exception) -> str:
  """Human-readable, non-empty reason for a failed invalidation.

  Service errors read "<code>: <message>", e.g.
  "AccessDenied: User is not authorized to perform: cloudfront:CreateInvalidation".
  """
  message = ""
  if isinstance(error, ClientError):
    details = error.response.get("Error", {})
    code = details.get("Code", "")
    message = details.get("Message", "")
    if code and message:
      message = f"{code}: {message}"
  if not message:
    message = str(error)
  if not message:
    message = type(error).__name__
  return message[:MAX_FAILURE_MESSAGE_LENGTH]


class CacheInvalidationNotifier:
  """Invalidate a distribution and report the outcome to CodePipeline.

  Args:
    cloudfront: CloudFront client (anything with ``create_invalidation``)
    codepipeline: CodePipeline client (anything with
      ``put_job_success_result`` and ``put_job_failure_result``)
    distribution_id: ID of the distribution to invalidate
  """

  def __init__(
    self,
    *,
    cloudfront: Any,
    codepipeline: Any,
    distribution_id: str,
  ) -> None:
    self._cloudfront = cloudfront
    self._codepipeline = codepipeline
    self.distribution_id = distribution_id

  def invalidate(self, job_id: str) -> JobOutcome:
    """Invalidate ``/*`` for one pipeline job and file its result.

    The job ID doubles as the invalidation caller reference, so CloudFront
    deduplicates repeated deliveries of the same job. Errors from the
    invalidation request are never raised; errors while filing the result
    are, since there is no other channel to report them on.
    """
    outcome = self._request_invalidation(job_id)
    self._report(outcome)
    return outcome

  def _request_invalidation(self, job_id: str) -> JobOutcome:
    try:
      if not self.distribution_id:
        raise InvalidDistributionError("No distribution ID configured")

      response = self._cloudfront.create_invalidation(
        DistributionId=self.distribution_id,
        InvalidationBatch={
          "Paths": {
            "Quantity": len(INVALIDATION_PATHS),
            "Items": list(INVALIDATION_PATHS),
          },
          "CallerReference": job_id,
        },
      )
    except Exception as e:
      logger.exception(
        "Invalidation failed",
        extra={"distribution_id": self.distribution_id},
      )
      return JobFailed(job_id=job_id, message=failure_message(e))

    invalidation_id = (response or {}).get("Invalidation", {}).get("Id")
    logger.info(
      "Created invalidation",
      extra={
        "distribution_id": self.distribution_id,
        "invalidation_id": invalidation_id,
      },
    )
    return JobSucceeded(job_id=job_id, invalidation_id=invalidation_id)

  def _report(self, outcome: JobOutcome) -> None:
    if isinstance(outcome, JobSucceeded):
      self._codepipeline.put_job_success_result(jobId=outcome.job_id)
      logger.info("Reported job success")
    else:
      self._codepipeline.put_job_failure_result(
        jobId=outcome.job_id,
        failureDetails={
          "type": outcome.type,
          "message": outcome.message,
        },
      )
      logger.info("Reported job failure", extra={"reason": outcome.message})
