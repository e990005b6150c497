"""Tests for the cache invalidation notifier."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from notifier import (
  MAX_FAILURE_MESSAGE_LENGTH,
  CacheInvalidationNotifier,
  JobFailed,
  JobSucceeded,
  NotifierSettings,
  failure_message,
)


def _client_error(code: str, message: str, operation: str = "CreateInvalidation") -> ClientError:
  return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def _notifier(
  cloudfront: MagicMock,
  codepipeline: MagicMock,
  distribution_id: str = "E1234ABCD",
) -> CacheInvalidationNotifier:
  return CacheInvalidationNotifier(
    cloudfront=cloudfront,
    codepipeline=codepipeline,
    distribution_id=distribution_id,
  )


def _report_count(codepipeline: MagicMock) -> int:
  return (
    codepipeline.put_job_success_result.call_count
    + codepipeline.put_job_failure_result.call_count
  )


class TestSuccessfulInvalidation:
  """The distribution accepts the invalidation."""

  def test_requests_all_paths_with_job_id_as_caller_reference(
    self, cloudfront: MagicMock, codepipeline: MagicMock
  ) -> None:
    """One request for /* keyed by the job ID."""
    _notifier(cloudfront, codepipeline).invalidate("build-42")

    cloudfront.create_invalidation.assert_called_once_with(
      DistributionId="E1234ABCD",
      InvalidationBatch={
        "Paths": {"Quantity": 1, "Items": ["/*"]},
        "CallerReference": "build-42",
      },
    )

  def test_reports_success(self, cloudfront: MagicMock, codepipeline: MagicMock) -> None:
    """Success is filed for the same job, and no failure."""
    outcome = _notifier(cloudfront, codepipeline).invalidate("build-42")

    assert outcome == JobSucceeded(job_id="build-42", invalidation_id="I1")
    codepipeline.put_job_success_result.assert_called_once_with(jobId="build-42")
    codepipeline.put_job_failure_result.assert_not_called()

  def test_missing_invalidation_id_still_succeeds(
    self, cloudfront: MagicMock, codepipeline: MagicMock
  ) -> None:
    """An accepted request with an unexpected response body is still a success."""
    cloudfront.create_invalidation.return_value = {}

    outcome = _notifier(cloudfront, codepipeline).invalidate("build-42")

    assert isinstance(outcome, JobSucceeded)
    assert outcome.invalidation_id is None

  def test_outcome_dict(self, cloudfront: MagicMock, codepipeline: MagicMock) -> None:
    outcome = _notifier(cloudfront, codepipeline).invalidate("build-42")

    assert outcome.to_dict() == {
      "jobId": "build-42",
      "status": "succeeded",
      "invalidationId": "I1",
    }


class TestFailedInvalidation:
  """The invalidation request raises."""

  def test_not_found_reports_failure(self, cloudfront: MagicMock, codepipeline: MagicMock) -> None:
    """A plain exception's text becomes the failure message."""
    cloudfront.create_invalidation.side_effect = Exception("Distribution E-INVALID not found")

    outcome = _notifier(cloudfront, codepipeline, "E-INVALID").invalidate("build-43")

    assert outcome == JobFailed(job_id="build-43", message="Distribution E-INVALID not found")
    codepipeline.put_job_failure_result.assert_called_once_with(
      jobId="build-43",
      failureDetails={
        "type": "JobFailed",
        "message": "Distribution E-INVALID not found",
      },
    )
    codepipeline.put_job_success_result.assert_not_called()

  @pytest.mark.parametrize(
    ("code", "message"),
    [
      ("AccessDenied", "User is not authorized to perform: cloudfront:CreateInvalidation"),
      ("NoSuchDistribution", "The specified distribution does not exist."),
      ("Throttling", "Rate exceeded"),
    ],
  )
  def test_service_errors_report_failure_once(
    self,
    cloudfront: MagicMock,
    codepipeline: MagicMock,
    code: str,
    message: str,
  ) -> None:
    """Rejected requests are reported with the error code and message and never retried."""
    cloudfront.create_invalidation.side_effect = _client_error(code, message)

    outcome = _notifier(cloudfront, codepipeline).invalidate("build-44")

    assert isinstance(outcome, JobFailed)
    assert outcome.job_id == "build-44"
    assert outcome.type == "JobFailed"
    assert outcome.message == f"{code}: {message}"
    assert cloudfront.create_invalidation.call_count == 1
    assert _report_count(codepipeline) == 1

  def test_network_error_reports_failure(
    self, cloudfront: MagicMock, codepipeline: MagicMock
  ) -> None:
    cloudfront.create_invalidation.side_effect = EndpointConnectionError(
      endpoint_url="https://cloudfront.amazonaws.com"
    )

    outcome = _notifier(cloudfront, codepipeline).invalidate("build-45")

    assert isinstance(outcome, JobFailed)
    assert "cloudfront.amazonaws.com" in outcome.message

  def test_missing_distribution_id_fails_without_request(
    self, cloudfront: MagicMock, codepipeline: MagicMock
  ) -> None:
    """No request can be formed, but the job still gets a failure result."""
    outcome = _notifier(cloudfront, codepipeline, distribution_id="").invalidate("build-46")

    assert isinstance(outcome, JobFailed)
    assert outcome.message == "No distribution ID configured"
    cloudfront.create_invalidation.assert_not_called()
    codepipeline.put_job_failure_result.assert_called_once()

  def test_outcome_dict(self, cloudfront: MagicMock, codepipeline: MagicMock) -> None:
    cloudfront.create_invalidation.side_effect = Exception("boom")

    outcome = _notifier(cloudfront, codepipeline).invalidate("build-47")

    assert outcome.to_dict() == {
      "jobId": "build-47",
      "status": "failed",
      "type": "JobFailed",
      "message": "boom",
    }


class TestReporting:
  """Filing the job result."""

  def test_same_job_twice_forwards_same_caller_reference(
    self, cloudfront: MagicMock, codepipeline: MagicMock
  ) -> None:
    """Deduplication is left to CloudFront; both requests carry the job ID."""
    notifier = _notifier(cloudfront, codepipeline)

    notifier.invalidate("build-42")
    notifier.invalidate("build-42")

    references = [
      call.kwargs["InvalidationBatch"]["CallerReference"]
      for call in cloudfront.create_invalidation.call_args_list
    ]
    assert references == ["build-42", "build-42"]
    assert codepipeline.put_job_success_result.call_count == 2

  def test_report_error_propagates(self, cloudfront: MagicMock, codepipeline: MagicMock) -> None:
    """A result that cannot be filed is raised rather than swallowed."""
    codepipeline.put_job_success_result.side_effect = _client_error(
      "JobNotFoundException", "Job build-42 not found", "PutJobSuccessResult"
    )

    with pytest.raises(ClientError):
      _notifier(cloudfront, codepipeline).invalidate("build-42")

    codepipeline.put_job_failure_result.assert_not_called()


class TestFailureMessage:
  """Tests for failure_message."""

  def test_client_error_prefixes_error_code(self) -> None:
    error = _client_error("NoSuchDistribution", "Distribution E-INVALID not found")
    assert failure_message(error) == "NoSuchDistribution: Distribution E-INVALID not found"

  def test_client_error_without_code_uses_service_message(self) -> None:
    error = ClientError({"Error": {"Message": "Rate exceeded"}}, "CreateInvalidation")
    assert failure_message(error) == "Rate exceeded"

  def test_client_error_without_message_uses_str(self) -> None:
    error = ClientError({"Error": {"Code": "InternalError"}}, "CreateInvalidation")
    assert "InternalError" in failure_message(error)

  def test_empty_message_falls_back_to_class_name(self) -> None:
    assert failure_message(RuntimeError()) == "RuntimeError"

  def test_long_message_is_truncated(self) -> None:
    message = failure_message(Exception("x" * (MAX_FAILURE_MESSAGE_LENGTH + 100)))
    assert len(message) == MAX_FAILURE_MESSAGE_LENGTH


class TestNotifierSettings:
  """Tests for NotifierSettings.from_env."""

  def test_reads_distribution_id(self, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DISTRIBUTION_ID", " E1234ABCD ")
    assert NotifierSettings.from_env().distribution_id == "E1234ABCD"

  def test_missing_distribution_id_is_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DISTRIBUTION_ID", raising=False)
    assert NotifierSettings.from_env().distribution_id == ""
