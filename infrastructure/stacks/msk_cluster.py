"""KafkaCluster construct: a validated, provisioned Amazon MSK cluster."""

import logging
from dataclasses import dataclass
from typing import Optional

from aws_cdk import (
    Aws,
    RemovalPolicy,
    Token,
    aws_ec2 as ec2,
    aws_logs as logs,
    aws_msk as msk,
)
from constructs import Construct

from infrastructure.models import ClusterConfig
from infrastructure.validators import (
    ALLOWED_INSTANCE_TYPES,
    ALLOWED_KAFKA_VERSIONS,
    ALLOWED_MONITORING_LEVELS,
    ClusterConfigError,
    brokers_per_subnet,
    validate_cluster_config,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngressRule:
    port: int
    description: str


class KafkaCluster(Construct):
    """
    MSK cluster with its own security group.

    The configuration is validated before anything is declared, so an invalid
    config aborts synthesis with a ClusterConfigError. Values that are
    CloudFormation tokens (e.g. parameters) are left to CloudFormation.
    """

    ALLOWED_KAFKA_VERSIONS = list(ALLOWED_KAFKA_VERSIONS)
    ALLOWED_INSTANCE_TYPES = list(ALLOWED_INSTANCE_TYPES)
    ALLOWED_MONITORING_LEVELS = list(ALLOWED_MONITORING_LEVELS)

    # Ports brokers, ZooKeeper and clients inside the security group talk on.
    REQUIRED_RULES = (
        IngressRule(2181, "ZooKeeper Plaintext"),
        IngressRule(2182, "ZooKeeper TLS"),
        IngressRule(9092, "Bootstrap servers Plaintext"),
        IngressRule(9094, "Bootstrap servers TLS"),
        IngressRule(9096, "SASL/SCRAM"),
        IngressRule(9098, "IAM access control"),
    )

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: ClusterConfig,
        cluster_name: Optional[str] = None,
        log_retention: logs.RetentionDays = logs.RetentionDays.ONE_MONTH,
    ) -> None:
        """
        Initialize the KafkaCluster construct.

        Args:
            scope: The parent construct
            construct_id: The logical ID of the construct
            config: Cluster configuration (literal values or tokens)
            cluster_name: MSK cluster name (defaults to one derived from the stack name)
            log_retention: Retention of the broker log group

        Raises:
            ClusterConfigError: If the configuration is invalid
        """
        super().__init__(scope, construct_id)

        try:
            self.config = validate_cluster_config(config, is_unresolved=Token.is_unresolved)
        except ClusterConfigError as e:
            logger.info("Rejected configuration for %s: %s", self.node.path, e.message)
            raise

        self.brokers_per_subnet = brokers_per_subnet(self.config, is_unresolved=Token.is_unresolved)
        logger.debug("%s: %s brokers per subnet", self.node.path, self.brokers_per_subnet)

        self.security_group = ec2.CfnSecurityGroup(
            self,
            "SecurityGroup",
            vpc_id=config.broker_vpc_id,
            group_description="Security group for the MSK cluster brokers",
        )

        # Members of the group (brokers and clients) may reach each other on the broker ports.
        for rule in self.REQUIRED_RULES:
            ec2.CfnSecurityGroupIngress(
                self,
                f"Ingress{rule.port}",
                group_id=self.security_group.attr_group_id,
                source_security_group_id=self.security_group.attr_group_id,
                ip_protocol="tcp",
                from_port=rule.port,
                to_port=rule.port,
                description=rule.description,
            )

        broker_logs = logs.LogGroup(
            self,
            "BrokerLogs",
            retention=log_retention,
            removal_policy=RemovalPolicy.RETAIN,
        )

        self.cluster = msk.CfnCluster(
            self,
            "Cluster",
            cluster_name=cluster_name or f"msk-{Aws.STACK_NAME}",
            kafka_version=config.kafka_version,
            number_of_broker_nodes=config.number_of_broker_nodes,
            enhanced_monitoring=config.monitoring_level,
            broker_node_group_info=msk.CfnCluster.BrokerNodeGroupInfoProperty(
                client_subnets=list(config.broker_subnets),
                instance_type=config.broker_instance_type,
                security_groups=[self.security_group.attr_group_id],
                storage_info=msk.CfnCluster.StorageInfoProperty(
                    ebs_storage_info=msk.CfnCluster.EBSStorageInfoProperty(
                        volume_size=config.ebs_volume_size,
                    ),
                ),
            ),
            encryption_info=msk.CfnCluster.EncryptionInfoProperty(
                encryption_in_transit=msk.CfnCluster.EncryptionInTransitProperty(
                    client_broker="TLS",
                    in_cluster=True,
                ),
            ),
            logging_info=msk.CfnCluster.LoggingInfoProperty(
                broker_logs=msk.CfnCluster.BrokerLogsProperty(
                    cloud_watch_logs=msk.CfnCluster.CloudWatchLogsProperty(
                        enabled=True,
                        log_group=broker_logs.log_group_name,
                    ),
                ),
            ),
        )

    @property
    def cluster_arn(self) -> str:
        return self.cluster.ref

    @property
    def security_group_id(self) -> str:
        return self.security_group.attr_group_id
