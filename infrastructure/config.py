"""
Configuration for the MSK cluster CDK app.

Settings come from CDK context (cdk.json or `cdk synth --context key=value`)
and a few environment variables:

  - CDK_DEFAULT_ACCOUNT / CDK_DEFAULT_REGION  (provided by the CDK CLI)
  - LOG_LEVEL                                 (optional, default: INFO)

Context keys:
  - environment_name  (optional, default: dev)
  - kafka_cluster     (optional) mapping with the ClusterConfig fields. When it
                      is absent the stack is synthesized with CloudFormation
                      parameters instead of literal values.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Mapping, Optional

from aws_cdk import App, Environment

from infrastructure.models import ClusterConfig, create_cluster_config

logger = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT_NAME = "dev"
DEFAULT_REGION = "eu-central-1"

CLUSTER_CONTEXT_KEY = "kafka_cluster"

_CLUSTER_FIELDS = (
    "kafka_version",
    "number_of_broker_nodes",
    "broker_instance_type",
    "monitoring_level",
    "ebs_volume_size",
    "broker_vpc_id",
    "broker_subnets",
)


class ConfigError(RuntimeError):
    """Configuration could not be read (missing or malformed values)."""


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable, stripped; return default if unset or empty."""
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


def _coerce_log_level(level: Optional[str]) -> int:
    level_upper = (level or "").strip().upper()
    if not level_upper:
        return logging.INFO
    return logging._nameToLevel.get(level_upper, logging.INFO)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for synth runs.

    Uses root logger configuration only if nothing is configured yet.
    """
    resolved = _coerce_log_level(level or _get_env("LOG_LEVEL"))
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=resolved,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    else:
        root.setLevel(resolved)


def get_environment() -> Environment:
    """Return the deployment account/region as provided by the CDK CLI."""
    return Environment(
        account=_get_env("CDK_DEFAULT_ACCOUNT"),
        region=_get_env("CDK_DEFAULT_REGION", DEFAULT_REGION),
    )


def get_environment_name(app: App) -> str:
    return app.node.try_get_context("environment_name") or DEFAULT_ENVIRONMENT_NAME


def parse_cluster_config(raw: Any) -> ClusterConfig:
    """
    Build a ClusterConfig from a context value.

    Args:
        raw: Mapping of ClusterConfig fields, or a JSON string of one
            (`--context` values given on the command line arrive as strings)

    Raises:
        ConfigError: If the value is not a mapping or a field is missing or malformed
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{CLUSTER_CONTEXT_KEY} context is not valid JSON: {e}") from e

    if not isinstance(raw, Mapping):
        raise ConfigError(f"{CLUSTER_CONTEXT_KEY} context must be a mapping")

    missing = [name for name in _CLUSTER_FIELDS if name not in raw]
    if missing:
        raise ConfigError(f"{CLUSTER_CONTEXT_KEY} context is missing: {', '.join(missing)}")

    try:
        return create_cluster_config(**{name: raw[name] for name in _CLUSTER_FIELDS})
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{CLUSTER_CONTEXT_KEY} context has a malformed value: {e}") from e


def load_cluster_config(app: App) -> Optional[ClusterConfig]:
    """Return the literal cluster config from context, or None for a parameterized template."""
    raw = app.node.try_get_context(CLUSTER_CONTEXT_KEY)
    if raw is None:
        logger.info("No %s context set; synthesizing with CloudFormation parameters", CLUSTER_CONTEXT_KEY)
        return None

    config = parse_cluster_config(raw)
    logger.info(
        "Synthesizing MSK cluster with %d brokers over %d subnets",
        config.number_of_broker_nodes,
        len(config.broker_subnets),
    )
    return config
