"""CDK constructs for static website infrastructure."""

from .build import SiteBuildProject
from .distribution import CloudFrontDistribution
from .invalidation import CacheInvalidationFunction
from .notifications import PipelineNotifications
from .pipeline import DeliveryPipeline
from .static_site import StaticSiteConstruct
from .storage import StorageBucket

__all__ = [
  "CacheInvalidationFunction",
  "CloudFrontDistribution",
  "DeliveryPipeline",
  "PipelineNotifications",
  "SiteBuildProject",
  "StaticSiteConstruct",
  "StorageBucket",
]
