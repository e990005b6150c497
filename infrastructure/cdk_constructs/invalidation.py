"""Lambda that invalidates the CloudFront cache for a CodePipeline job."""

from pathlib import Path

from aws_cdk import Duration, Stack
from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_iam as iam
from aws_cdk import aws_lambda as lambda_
from constructs import Construct

HANDLER_DIR = Path(__file__).parent.parent / "lambdas" / "cache_invalidation"

# AWS-published Powertools for AWS Lambda (Python) layer
POWERTOOLS_LAYER_ACCOUNT = "017000801446"
POWERTOOLS_LAYER_NAME = "AWSLambdaPowertoolsPythonV3-python312-x86_64"
POWERTOOLS_LAYER_VERSION = 7


class CacheInvalidationFunction(Construct):
  """Lambda invoked by the pipeline to invalidate ``/*`` on the distribution.

  The distribution ID is passed as a CloudFormation reference in the
  function's environment, so the function is updated whenever the
  distribution is replaced.
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    distribution: cloudfront.IDistribution,
    function_name: str | None = None,
    memory_size: int = 1024,
    resource_prefix: str = "",
  ) -> None:
    super().__init__(scope, id)

    stack = Stack.of(self)

    powertools = lambda_.LayerVersion.from_layer_version_arn(
      self,
      "PowertoolsLayer",
      f"arn:aws:lambda:{stack.region}:{POWERTOOLS_LAYER_ACCOUNT}:layer:"
      f"{POWERTOOLS_LAYER_NAME}:{POWERTOOLS_LAYER_VERSION}",
    )

    self.handler = lambda_.Function(
      self,
      f"{resource_prefix}-invalidation-lambda" if resource_prefix else "Handler",
      function_name=function_name,
      runtime=lambda_.Runtime.PYTHON_3_12,
      handler="index.lambda_handler",
      code=lambda_.Code.from_asset(
        str(HANDLER_DIR),
        exclude=["__pycache__", "*.pyc"],
      ),
      layers=[powertools],
      memory_size=memory_size,
      environment={
        "DISTRIBUTION_ID": distribution.distribution_id,
        "POWERTOOLS_SERVICE_NAME": "cache-invalidation",
        "POWERTOOLS_LOG_LEVEL": "INFO",
      },
      timeout=Duration.seconds(30),
    )

    # Grant CloudFront invalidation permissions
    self.handler.add_to_role_policy(
      iam.PolicyStatement(
        actions=[
          "cloudfront:CreateInvalidation",
          "cloudfront:GetDistribution",
        ],
        resources=[
          f"arn:aws:cloudfront::{stack.account}:distribution/{distribution.distribution_id}"
        ],
      )
    )

    # Job result APIs don't support resource-level permissions
    self.handler.add_to_role_policy(
      iam.PolicyStatement(
        actions=[
          "codepipeline:AcknowledgeJob",
          "codepipeline:GetJobDetails",
          "codepipeline:PollForJobs",
          "codepipeline:PutJobFailureResult",
          "codepipeline:PutJobSuccessResult",
        ],
        resources=["*"],
      )
    )
