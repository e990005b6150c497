"""CodeBuild project that builds the site and syncs it to the bucket."""

from aws_cdk import aws_codebuild as codebuild
from aws_cdk import aws_iam as iam
from aws_cdk import aws_s3 as s3
from constructs import Construct


class SiteBuildProject(Construct):
  """CodeBuild project used by the pipeline's Build stage.

  The buildspec lives in the site repository; it receives the target bucket
  in ``SITE_BUCKET``.
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    bucket: s3.IBucket,
    build_image: codebuild.IBuildImage = codebuild.LinuxBuildImage.STANDARD_7_0,
  ) -> None:
    super().__init__(scope, id)

    self.project = codebuild.PipelineProject(
      self,
      "Project",
      environment=codebuild.BuildEnvironment(build_image=build_image),
      environment_variables={
        "SITE_BUCKET": codebuild.BuildEnvironmentVariable(value=bucket.bucket_name),
      },
    )

    # Allow the buildspec to sync the built site into the bucket
    self.project.add_to_role_policy(
      iam.PolicyStatement(
        actions=["s3:PutObject", "s3:ListBucket", "s3:DeleteObject"],
        resources=[bucket.arn_for_objects("*"), bucket.bucket_arn],
      )
    )
