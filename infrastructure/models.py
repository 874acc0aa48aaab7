"""
Data models for the MSK cluster infrastructure.

Provides the ClusterConfig record consumed by the KafkaCluster construct and
a helper for building it from loosely typed input (CDK context, JSON).
"""

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple


@dataclass(frozen=True)
class ClusterConfig:
    """
    Proposed configuration of a provisioned MSK cluster.

    Attributes:
        kafka_version: Apache Kafka version running on the brokers
        number_of_broker_nodes: Total number of brokers across all subnets
        broker_instance_type: MSK broker instance size (e.g. kafka.m5.large)
        monitoring_level: Enhanced monitoring level for CloudWatch metrics
        ebs_volume_size: EBS storage per broker, in GiB
        broker_vpc_id: VPC the brokers are placed in
        broker_subnets: Client subnets, one per availability zone
    """

    kafka_version: str
    number_of_broker_nodes: int
    broker_instance_type: str
    monitoring_level: str
    ebs_volume_size: int
    broker_vpc_id: str
    broker_subnets: Tuple[str, ...]

    def __post_init__(self) -> None:
        # Accept any sequence but keep the record immutable.
        if not isinstance(self.broker_subnets, tuple):
            object.__setattr__(self, "broker_subnets", tuple(self.broker_subnets))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "kafka_version": self.kafka_version,
            "number_of_broker_nodes": self.number_of_broker_nodes,
            "broker_instance_type": self.broker_instance_type,
            "monitoring_level": self.monitoring_level,
            "ebs_volume_size": self.ebs_volume_size,
            "broker_vpc_id": self.broker_vpc_id,
            "broker_subnets": list(self.broker_subnets),
        }


def _to_int(name: str, value: Any) -> int:
    """
    Convert a numeric context value to int without losing information.

    Accepts ints, integral floats (4.0) and integer strings ("4"). Bools and
    floats with a fractional part are rejected rather than truncated.

    Raises:
        ValueError: If the value is not a whole number
    """
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer (given {value!r})")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{name} must be an integer (given {value!r})")
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ValueError(f"{name} must be an integer (given {value!r})") from None
    if isinstance(value, int):
        return value
    raise ValueError(f"{name} must be an integer (given {value!r})")


def create_cluster_config(
    kafka_version: str,
    number_of_broker_nodes: Any,
    broker_instance_type: str,
    monitoring_level: str,
    ebs_volume_size: Any,
    broker_vpc_id: str,
    broker_subnets: Sequence[str],
) -> ClusterConfig:
    """
    Create a ClusterConfig from raw values.

    Numeric fields are converted to int so values read from CDK context or
    the command line (which may arrive as strings) end up with the right type.
    Strings are taken as-is; allow-list checks are case-sensitive.

    Raises:
        ValueError: If a numeric field is not a whole number
    """
    if isinstance(broker_subnets, str):
        broker_subnets = [s for s in broker_subnets.split(",") if s]

    return ClusterConfig(
        kafka_version=kafka_version,
        number_of_broker_nodes=_to_int("number_of_broker_nodes", number_of_broker_nodes),
        broker_instance_type=broker_instance_type,
        monitoring_level=monitoring_level,
        ebs_volume_size=_to_int("ebs_volume_size", ebs_volume_size),
        broker_vpc_id=broker_vpc_id,
        broker_subnets=tuple(broker_subnets),
    )
