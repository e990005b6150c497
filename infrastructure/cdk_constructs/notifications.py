"""Email notifications for pipeline state changes."""

from aws_cdk import aws_codepipeline as codepipeline
from aws_cdk import aws_events_targets as targets
from aws_cdk import aws_sns as sns
from aws_cdk import aws_sns_subscriptions as subscriptions
from constructs import Construct


class PipelineNotifications(Construct):
  """SNS topic fed by an EventBridge rule on pipeline state changes."""

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    pipeline: codepipeline.IPipeline,
    emails: list[str] | None = None,
  ) -> None:
    super().__init__(scope, id)

    self.topic = sns.Topic(self, "Topic")
    for email in emails or []:
      self.topic.add_subscription(subscriptions.EmailSubscription(email))

    self.rule = pipeline.on_state_change(
      "StateChange",
      target=targets.SnsTopic(self.topic),
    )
