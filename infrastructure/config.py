"""Configuration loader for static site pipelines."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from aws_cdk import RemovalPolicy
from aws_cdk import aws_codebuild as codebuild

BUILD_IMAGES = {
  "STANDARD_5_0": codebuild.LinuxBuildImage.STANDARD_5_0,
  "STANDARD_6_0": codebuild.LinuxBuildImage.STANDARD_6_0,
  "STANDARD_7_0": codebuild.LinuxBuildImage.STANDARD_7_0,
  "AMAZON_LINUX_2_5": codebuild.LinuxBuildImage.AMAZON_LINUX_2_5,
}

REMOVAL_POLICIES = {
  "retain": RemovalPolicy.RETAIN,
  "destroy": RemovalPolicy.DESTROY,
  "snapshot": RemovalPolicy.SNAPSHOT,
}

_BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
# Used in stack and pipeline names
_SITE_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9-]{0,63}$")


class ConfigError(ValueError):
  """Raised when the site configuration is incomplete or invalid."""


@dataclass
class PublicAccessConfig:
  """S3 public access block flags. All blocked unless overridden."""

  block_public_acls: bool = True
  block_public_policy: bool = True
  ignore_public_acls: bool = True
  restrict_public_buckets: bool = True


@dataclass
class SourceConfig:
  """GitHub repository the pipeline builds from."""

  owner: str
  repo: str
  branch: str = "main"
  oauth_secret_name: str = "github-PAT"
  oauth_secret_field: str = "github-PAT"


@dataclass
class SiteConfig:
  """Configuration for a single static site and its delivery pipeline."""

  name: str
  bucket_name: str
  source: SourceConfig
  index_document: str = "index.html"
  public_access: PublicAccessConfig = field(default_factory=PublicAccessConfig)
  build_image: str = "STANDARD_7_0"
  notification_emails: list[str] = field(default_factory=list)
  invalidation_function_name: str | None = None
  invalidation_memory_mb: int = 1024
  removal_policy: RemovalPolicy = RemovalPolicy.RETAIN
  region: str = "us-east-1"

  @property
  def linux_build_image(self) -> codebuild.IBuildImage:
    return BUILD_IMAGES[self.build_image]

  def validate(self) -> None:
    """Check values that CloudFormation would otherwise reject late."""
    if not _SITE_NAME_RE.match(self.name):
      raise ConfigError(f"invalid site name {self.name!r} (letters, digits and hyphens)")
    if not _BUCKET_NAME_RE.match(self.bucket_name) or ".." in self.bucket_name:
      raise ConfigError(f"{self.name}: invalid bucket name {self.bucket_name!r}")
    if self.build_image not in BUILD_IMAGES:
      choices = ", ".join(sorted(BUILD_IMAGES))
      raise ConfigError(
        f"{self.name}: unknown build image {self.build_image!r} (expected one of {choices})"
      )
    for email in self.notification_emails:
      if not _EMAIL_RE.match(email):
        raise ConfigError(f"{self.name}: invalid notification email {email!r}")
    if self.invalidation_memory_mb <= 0:
      raise ConfigError(f"{self.name}: invalidation_memory_mb must be positive")
    if not self.index_document:
      raise ConfigError(f"{self.name}: index_document must not be empty")


def _require(data: dict[str, Any], key: str, site_label: str) -> Any:
  value = data.get(key)
  if value in (None, ""):
    raise ConfigError(f"{site_label}: missing required key {key!r}")
  return value


def _optional(data: dict[str, Any], key: str, default: Any) -> Any:
  # A key written without a value (YAML null) counts as absent
  value = data.get(key)
  return default if value is None else value


def _optional_str(data: dict[str, Any], key: str, default: str, site_label: str) -> str:
  value = _optional(data, key, default)
  if not isinstance(value, str) or not value.strip():
    raise ConfigError(f"{site_label}: {key} must be a non-empty string, got {value!r}")
  return value


def _optional_int(data: dict[str, Any], key: str, default: int, site_label: str) -> int:
  value = _optional(data, key, default)
  # bool is an int subclass; "true" is not a memory size
  if isinstance(value, bool):
    raise ConfigError(f"{site_label}: {key} must be an integer, got {value!r}")
  try:
    return int(value)
  except (TypeError, ValueError) as e:
    raise ConfigError(f"{site_label}: {key} must be an integer, got {value!r}") from e


def _flag(data: dict[str, Any], key: str) -> bool:
  value = _optional(data, key, True)
  if not isinstance(value, bool):
    raise ConfigError(f"block_public_access.{key} must be true or false, got {value!r}")
  return value


def _parse_public_access(value: Any) -> PublicAccessConfig:
  # "block_all" or a mapping of individual flags
  if value is None or value == "block_all":
    return PublicAccessConfig()
  if not isinstance(value, dict):
    raise ConfigError(f"block_public_access must be 'block_all' or a mapping, got {value!r}")
  return PublicAccessConfig(
    block_public_acls=_flag(value, "block_public_acls"),
    block_public_policy=_flag(value, "block_public_policy"),
    ignore_public_acls=_flag(value, "ignore_public_acls"),
    restrict_public_buckets=_flag(value, "restrict_public_buckets"),
  )


def _parse_site(merged: dict[str, Any], index: int) -> SiteConfig:
  label = merged.get("name") or f"sites[{index}]"

  removal_policy_str = str(_optional(merged, "removal_policy", "retain")).lower()
  if removal_policy_str not in REMOVAL_POLICIES:
    raise ConfigError(f"{label}: unknown removal policy {removal_policy_str!r}")

  emails = merged.get("notification_emails") or []
  if isinstance(emails, str):
    emails = [emails]
  if not isinstance(emails, list) or not all(isinstance(e, str) for e in emails):
    raise ConfigError(f"{label}: notification_emails must be a list of addresses")

  function_name = merged.get("invalidation_function_name")
  if function_name is not None and not isinstance(function_name, str):
    raise ConfigError(f"{label}: invalidation_function_name must be a string")

  site = SiteConfig(
    name=str(_require(merged, "name", label)),
    bucket_name=str(_require(merged, "bucket_name", label)),
    source=SourceConfig(
      owner=str(_require(merged, "source_owner", label)),
      repo=str(_require(merged, "source_repo", label)),
      branch=_optional_str(merged, "source_branch", "main", label),
      oauth_secret_name=_optional_str(merged, "oauth_secret_name", "github-PAT", label),
      oauth_secret_field=_optional_str(merged, "oauth_secret_field", "github-PAT", label),
    ),
    index_document=_optional_str(merged, "index_document", "index.html", label),
    public_access=_parse_public_access(merged.get("block_public_access")),
    build_image=str(_optional(merged, "build_image", "STANDARD_7_0")).upper(),
    notification_emails=list(emails),
    invalidation_function_name=function_name,
    invalidation_memory_mb=_optional_int(merged, "invalidation_memory_mb", 1024, label),
    removal_policy=REMOVAL_POLICIES[removal_policy_str],
    region=_optional_str(merged, "region", "us-east-1", label),
  )
  site.validate()
  return site


@dataclass
class Config:
  """Multi-site configuration."""

  sites: list[SiteConfig] = field(default_factory=list)

  @classmethod
  def from_yaml(cls, path: Path | str = "sites.yaml") -> "Config":
    """Load and validate configuration from a YAML file."""
    with open(path) as f:
      data = yaml.safe_load(f) or {}

    defaults = data.get("defaults") or {}
    sites: list[SiteConfig] = []

    for index, site_data in enumerate(data.get("sites") or []):
      # Merge defaults with site-specific config; empty site keys keep the default
      overrides = {key: value for key, value in site_data.items() if value is not None}
      sites.append(_parse_site({**defaults, **overrides}, index))

    names = [site.name for site in sites]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
      raise ConfigError(f"Duplicate site names: {', '.join(duplicates)}")

    return cls(sites=sites)
