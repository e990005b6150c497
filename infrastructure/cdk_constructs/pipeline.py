"""CodePipeline: GitHub source, CodeBuild, then CloudFront invalidation."""

from aws_cdk import SecretValue
from aws_cdk import aws_codebuild as codebuild
from aws_cdk import aws_codepipeline as codepipeline
from aws_cdk import aws_codepipeline_actions as actions
from aws_cdk import aws_lambda as lambda_
from constructs import Construct

from infrastructure.config import SourceConfig


class DeliveryPipeline(Construct):
  """Three-stage delivery pipeline for a static site.

  Stages:
  - Source: pull the repository branch from GitHub
  - Build: run the repository's buildspec, which deploys to the bucket
  - InvalidateCache: invoke the invalidation Lambda
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    source: SourceConfig,
    build_project: codebuild.IProject,
    invalidation_function: lambda_.IFunction,
    pipeline_name: str | None = None,
  ) -> None:
    super().__init__(scope, id)

    self.source_output = codepipeline.Artifact("SourceOutput")
    self.build_output = codepipeline.Artifact("BuildOutput")

    self.pipeline = codepipeline.Pipeline(
      self,
      "Pipeline",
      pipeline_name=pipeline_name,
      pipeline_type=codepipeline.PipelineType.V2,
      cross_account_keys=False,
    )

    self.pipeline.add_stage(
      stage_name="Source",
      actions=[
        actions.GitHubSourceAction(
          action_name="GitHubSource",
          owner=source.owner,
          repo=source.repo,
          branch=source.branch,
          oauth_token=SecretValue.secrets_manager(
            source.oauth_secret_name,
            json_field=source.oauth_secret_field,
          ),
          output=self.source_output,
        )
      ],
    )

    self.pipeline.add_stage(
      stage_name="Build",
      actions=[
        actions.CodeBuildAction(
          action_name="CodeBuild",
          project=build_project,
          input=self.source_output,
          outputs=[self.build_output],
        )
      ],
    )

    self.pipeline.add_stage(
      stage_name="InvalidateCache",
      actions=[
        actions.LambdaInvokeAction(
          action_name="InvalidateCache",
          lambda_=invalidation_function,
          inputs=[self.source_output],
        )
      ],
    )
