"""
Pytest configuration for the MSK cluster test suite.

Tests import `infrastructure...` normally. To make that work in a fresh
checkout without requiring an editable install, we add the repository root
to `sys.path`.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# CDK/jsii writes its runtime package cache to the user cache directory during
# import; keep it inside the repo.
os.environ.setdefault(
    "JSII_RUNTIME_PACKAGE_CACHE_ROOT",
    str(REPO_ROOT / ".jsii-package-cache"),
)

from infrastructure.models import ClusterConfig  # noqa: E402


@pytest.fixture
def valid_config() -> ClusterConfig:
    """The reference configuration: 4 brokers over 2 subnets."""
    return ClusterConfig(
        kafka_version="2.2.1",
        number_of_broker_nodes=4,
        broker_instance_type="kafka.m5.large",
        monitoring_level="DEFAULT",
        ebs_volume_size=1000,
        broker_vpc_id="my-vpc-id",
        broker_subnets=("subnet-a", "subnet-b"),
    )
