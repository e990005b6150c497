"""Main composite construct for a static website and its delivery pipeline."""

from aws_cdk import CfnOutput
from constructs import Construct

from infrastructure.config import SiteConfig

from .build import SiteBuildProject
from .distribution import CloudFrontDistribution
from .invalidation import CacheInvalidationFunction
from .notifications import PipelineNotifications
from .pipeline import DeliveryPipeline
from .storage import StorageBucket


class StaticSiteConstruct(Construct):
  """Complete static website infrastructure.

  Creates:
  - S3 bucket for static content (no public access)
  - CloudFront distribution reading the bucket through an OAI
  - CodeBuild project that builds and syncs the site
  - Lambda that invalidates the CloudFront cache
  - CodePipeline wiring Source -> Build -> InvalidateCache
  - SNS topic notified on pipeline state changes
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    site_config: SiteConfig,
  ) -> None:
    super().__init__(scope, id)

    name = site_config.name

    # Storage
    self.bucket = StorageBucket(
      self,
      f"{name}-bucket",
      bucket_name=site_config.bucket_name,
      index_document=site_config.index_document,
      public_access=site_config.public_access,
      removal_policy=site_config.removal_policy,
    )

    # CloudFront Distribution
    self.distribution = CloudFrontDistribution(
      self,
      f"{name}-distribution",
      bucket=self.bucket.bucket,
      default_root_object=site_config.index_document,
    )

    # Build
    self.build = SiteBuildProject(
      self,
      f"{name}-build",
      bucket=self.bucket.bucket,
      build_image=site_config.linux_build_image,
    )

    # Cache invalidation
    self.invalidation = CacheInvalidationFunction(
      self,
      f"{name}-invalidation",
      distribution=self.distribution.distribution,
      function_name=site_config.invalidation_function_name,
      memory_size=site_config.invalidation_memory_mb,
      resource_prefix=name,
    )

    # Pipeline
    self.pipeline = DeliveryPipeline(
      self,
      f"{name}-pipeline",
      source=site_config.source,
      build_project=self.build.project,
      invalidation_function=self.invalidation.handler,
      pipeline_name=f"{name}-pipeline",
    )

    # Notifications
    self.notifications = PipelineNotifications(
      self,
      f"{name}-notifications",
      pipeline=self.pipeline.pipeline,
      emails=site_config.notification_emails,
    )

    # Outputs
    CfnOutput(
      self,
      "BucketName",
      value=self.bucket.bucket.bucket_name,
      description="S3 bucket name",
    )
    CfnOutput(
      self,
      "DistributionId",
      value=self.distribution.distribution.distribution_id,
      description="CloudFront distribution ID",
    )
    CfnOutput(
      self,
      "DistributionDomainName",
      value=self.distribution.distribution.distribution_domain_name,
      description="CloudFront distribution domain name",
    )
    CfnOutput(
      self,
      "PipelineName",
      value=self.pipeline.pipeline.pipeline_name,
      description="CodePipeline name",
    )
    CfnOutput(
      self,
      "NotificationTopicArn",
      value=self.notifications.topic.topic_arn,
      description="SNS topic for pipeline state changes",
    )
