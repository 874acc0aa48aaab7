"""
Validation module for MSK cluster configuration.

Checks a proposed ClusterConfig against the constraints of Amazon MSK before
any resource is declared. Checks run in a fixed order and the first failing
one is raised, so a configuration that violates several constraints always
reports the same error.
"""

import logging
from typing import Any, Callable, Dict, Optional

from infrastructure.models import ClusterConfig

logger = logging.getLogger(__name__)

ALLOWED_KAFKA_VERSIONS = (
    "2.8.0",
    "2.7.0",
    "2.6.2",
    "2.6.1",
    "2.6.0",
    "2.5.1",
    "2.4.1.1",
    "2.3.1",
    "2.2.1",
)

ALLOWED_INSTANCE_TYPES = (
    "kafka.t3.small",
    "kafka.m5.large",
    "kafka.m5.xlarge",
    "kafka.m5.2xlarge",
    "kafka.m5.4xlarge",
    "kafka.m5.8xlarge",
    "kafka.m5.12xlarge",
    "kafka.m5.16xlarge",
    "kafka.m5.24xlarge",
)

ALLOWED_MONITORING_LEVELS = (
    "DEFAULT",
    "PER_BROKER",
    "PER_TOPIC_PER_BROKER",
    "PER_TOPIC_PER_PARTITION",
)

# MSK spreads brokers evenly over two or three availability zones.
MIN_SUBNETS = 2
MAX_SUBNETS = 3

MIN_EBS_VOLUME_SIZE = 1
MAX_EBS_VOLUME_SIZE = 16384


class ClusterConfigError(ValueError):
    """Base class for cluster configuration errors."""

    def __init__(self, field: str, value: Any, message: str) -> None:
        self.field = field
        self.value = value
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"field": self.field, "value": self.value, "message": self.message}


class SubnetCountOutOfRange(ClusterConfigError):
    """Raised when the broker subnets do not span 2 or 3 availability zones."""


class NonPositiveBrokerCount(ClusterConfigError):
    """Raised when the number of broker nodes is zero or negative."""


class BrokerCountNotMultipleOfSubnets(ClusterConfigError):
    """Raised when brokers cannot be spread evenly over the subnets."""


class VolumeSizeOutOfRange(ClusterConfigError):
    """Raised when the EBS volume size is outside what MSK supports."""


class UnknownKafkaVersion(ClusterConfigError):
    """Raised when the Kafka version is not supported."""


class UnknownInstanceType(ClusterConfigError):
    """Raised when the broker instance type is not supported."""


class UnknownMonitoringLevel(ClusterConfigError):
    """Raised when the enhanced monitoring level is not supported."""


def _never_unresolved(value: Any) -> bool:
    return False


def validate_cluster_config(
    config: ClusterConfig,
    is_unresolved: Optional[Callable[[Any], bool]] = None,
) -> ClusterConfig:
    """
    Validate a cluster configuration.

    Args:
        config: The configuration to validate
        is_unresolved: Optional predicate returning True for values that are
            only known at deploy time (e.g. CloudFormation parameter tokens).
            Checks involving such a value are skipped.

    Returns:
        The same config object, unchanged

    Raises:
        ClusterConfigError: The subclass matching the first failed check
    """
    unresolved = is_unresolved or _never_unresolved

    subnets = config.broker_subnets
    brokers = config.number_of_broker_nodes
    subnets_known = not unresolved(list(subnets))
    brokers_known = not unresolved(brokers)

    if subnets_known and not MIN_SUBNETS <= len(subnets) <= MAX_SUBNETS:
        raise SubnetCountOutOfRange(
            "broker_subnets",
            subnets,
            f"brokerSubnets must contain between {MIN_SUBNETS} and {MAX_SUBNETS} items "
            f"(given {len(subnets)})",
        )

    if brokers_known and brokers <= 0:
        raise NonPositiveBrokerCount(
            "number_of_broker_nodes",
            brokers,
            f"numberOfBrokerNodes must be a positive number (given {brokers})",
        )

    if subnets_known and brokers_known and brokers % len(subnets) != 0:
        raise BrokerCountNotMultipleOfSubnets(
            "number_of_broker_nodes",
            brokers,
            f"numberOfBrokerNodes must be a multiple of brokerSubnets "
            f"(given {brokers} brokers for {len(subnets)} subnets)",
        )

    volume_size = config.ebs_volume_size
    if not unresolved(volume_size) and not MIN_EBS_VOLUME_SIZE <= volume_size <= MAX_EBS_VOLUME_SIZE:
        raise VolumeSizeOutOfRange(
            "ebs_volume_size",
            volume_size,
            f"ebsVolumeSize must be a value between {MIN_EBS_VOLUME_SIZE} and "
            f"{MAX_EBS_VOLUME_SIZE} GiB (given {volume_size})",
        )

    _check_allowed(
        UnknownKafkaVersion, "kafka_version", config.kafka_version,
        ALLOWED_KAFKA_VERSIONS, "Kafka version", unresolved,
    )
    _check_allowed(
        UnknownInstanceType, "broker_instance_type", config.broker_instance_type,
        ALLOWED_INSTANCE_TYPES, "instance type", unresolved,
    )
    _check_allowed(
        UnknownMonitoringLevel, "monitoring_level", config.monitoring_level,
        ALLOWED_MONITORING_LEVELS, "monitoring level", unresolved,
    )

    logger.debug("Accepted cluster configuration: %s", config)
    return config


def _check_allowed(error_cls, field, value, allowed, label, unresolved) -> None:
    if unresolved(value):
        return
    if value not in allowed:
        raise error_cls(
            field, value, f"Unknown {label}: {value} (allowed values: {', '.join(allowed)})"
        )


def brokers_per_subnet(
    config: ClusterConfig,
    is_unresolved: Optional[Callable[[Any], bool]] = None,
) -> Optional[int]:
    """
    Number of brokers MSK places in each subnet.

    The config is validated first, so the subnet count is never zero here.
    Returns None when either count is only known at deploy time.

    Raises:
        ClusterConfigError: If the configuration is invalid
    """
    unresolved = is_unresolved or _never_unresolved
    validate_cluster_config(config, is_unresolved=unresolved)
    if unresolved(config.number_of_broker_nodes) or unresolved(list(config.broker_subnets)):
        return None
    return config.number_of_broker_nodes // len(config.broker_subnets)
