"""CDK stacks for static website infrastructure."""

from .site_stack import StaticSitePipelineStack

__all__ = ["StaticSitePipelineStack"]
