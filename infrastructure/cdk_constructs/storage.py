"""S3 bucket for static website content."""

from aws_cdk import RemovalPolicy
from aws_cdk import aws_s3 as s3
from constructs import Construct

from infrastructure.config import PublicAccessConfig


class StorageBucket(Construct):
  """S3 bucket holding the built site, served only through CloudFront."""

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    bucket_name: str,
    index_document: str = "index.html",
    public_access: PublicAccessConfig | None = None,
    removal_policy: RemovalPolicy = RemovalPolicy.RETAIN,
  ) -> None:
    super().__init__(scope, id)

    public_access = public_access or PublicAccessConfig()

    self.bucket = s3.Bucket(
      self,
      "Bucket",
      bucket_name=bucket_name,
      website_index_document=index_document,
      block_public_access=s3.BlockPublicAccess(
        block_public_acls=public_access.block_public_acls,
        block_public_policy=public_access.block_public_policy,
        ignore_public_acls=public_access.ignore_public_acls,
        restrict_public_buckets=public_access.restrict_public_buckets,
      ),
      removal_policy=removal_policy,
      auto_delete_objects=removal_policy == RemovalPolicy.DESTROY,
    )
