"""
MSK cluster stack.

Provisions a single Amazon MSK cluster through the KafkaCluster construct.

Two modes
---------
- Literal: a ClusterConfig is passed in (typically read from CDK context) and
  validated when the app is synthesized.
- Parameterized: no config is passed; the template declares CloudFormation
  parameters whose allowed values mirror the validator's allow-lists. The
  remaining numeric and subnet constraints are re-checked by MSK at deploy time.
"""

from typing import Optional

from aws_cdk import (
    CfnOutput,
    CfnParameter,
    Stack,
)
from constructs import Construct

from infrastructure.models import ClusterConfig
from infrastructure.stacks.msk_cluster import KafkaCluster
from infrastructure.validators import MAX_EBS_VOLUME_SIZE, MIN_EBS_VOLUME_SIZE


class MskClusterStack(Stack):
    """Stack for the MSK cluster and its security group."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment_name: str,
        cluster_config: Optional[ClusterConfig] = None,
        **kwargs,
    ) -> None:
        """
        Initialize the MSK cluster stack.

        Args:
            scope: The parent construct
            construct_id: The logical ID of the stack
            environment_name: The environment name (dev, prod, etc.)
            cluster_config: Literal cluster configuration; when omitted the
                stack exposes CloudFormation parameters instead
            **kwargs: Additional arguments to pass to Stack
        """
        super().__init__(scope, construct_id, **kwargs)
        self.environment_name = environment_name

        if cluster_config is None:
            cluster_config = self._create_parameters()

        self.kafka_cluster = KafkaCluster(
            self,
            "Msk",
            config=cluster_config,
            cluster_name=f"msk-cluster-{environment_name}",
        )

        CfnOutput(
            self,
            "ClusterArn",
            value=self.kafka_cluster.cluster_arn,
            export_name=f"MskClusterArn-{environment_name}",
            description="ARN of the MSK cluster",
        )

        CfnOutput(
            self,
            "SecurityGroupId",
            value=self.kafka_cluster.security_group_id,
            export_name=f"MskClusterSecurityGroupId-{environment_name}",
            description="Security group of the MSK brokers; attach it to clients",
        )

    def _create_parameters(self) -> ClusterConfig:
        """Declare CloudFormation parameters and return a config made of their tokens."""
        kafka_version = CfnParameter(
            self,
            "KafkaVersion",
            type="String",
            default="2.8.0",
            allowed_values=KafkaCluster.ALLOWED_KAFKA_VERSIONS,
        )

        broker_nodes = CfnParameter(
            self,
            "NumberOfBrokerNodes",
            type="Number",
            default=2,
            min_value=1,
            description="Must be a multiple of the number of subnets",
        )

        instance_type = CfnParameter(
            self,
            "InstanceType",
            type="String",
            default="kafka.m5.large",
            allowed_values=KafkaCluster.ALLOWED_INSTANCE_TYPES,
        )

        monitoring_level = CfnParameter(
            self,
            "MonitoringLevel",
            type="String",
            default="DEFAULT",
            allowed_values=KafkaCluster.ALLOWED_MONITORING_LEVELS,
        )

        volume_size = CfnParameter(
            self,
            "EbsVolumeSize",
            type="Number",
            default=1000,
            min_value=MIN_EBS_VOLUME_SIZE,
            max_value=MAX_EBS_VOLUME_SIZE,
            constraint_description=(
                f"EBS volume size must be between {MIN_EBS_VOLUME_SIZE} and {MAX_EBS_VOLUME_SIZE} GiB"
            ),
        )

        vpc_id = CfnParameter(self, "BrokerVpcId", type="AWS::EC2::VPC::Id")

        subnets = CfnParameter(
            self,
            "BrokerSubnets",
            type="List<AWS::EC2::Subnet::Id>",
            description="2 or 3 subnets, each in a different availability zone",
        )

        self.template_options.metadata = {
            "AWS::CloudFormation::Interface": {
                "ParameterGroups": [
                    {
                        "Label": {"default": "Broker configuration"},
                        "Parameters": [
                            kafka_version.logical_id,
                            broker_nodes.logical_id,
                            instance_type.logical_id,
                            monitoring_level.logical_id,
                            volume_size.logical_id,
                        ],
                    },
                    {
                        "Label": {"default": "Networking configuration"},
                        "Parameters": [vpc_id.logical_id, subnets.logical_id],
                    },
                ],
                "ParameterLabels": {
                    kafka_version.logical_id: {"default": "Apache Kafka version on the brokers"},
                    broker_nodes.logical_id: {"default": "Number of broker nodes"},
                    instance_type.logical_id: {"default": "Broker instance type"},
                    monitoring_level.logical_id: {"default": "Enhanced monitoring level"},
                    volume_size.logical_id: {"default": "EBS storage volume per broker (in GiB)"},
                    vpc_id.logical_id: {"default": "VPC where the cluster is deployed"},
                    subnets.logical_id: {"default": "Subnets where brokers are deployed"},
                },
            }
        }

        return ClusterConfig(
            kafka_version=kafka_version.value_as_string,
            number_of_broker_nodes=broker_nodes.value_as_number,
            broker_instance_type=instance_type.value_as_string,
            monitoring_level=monitoring_level.value_as_string,
            ebs_volume_size=volume_size.value_as_number,
            broker_vpc_id=vpc_id.value_as_string,
            broker_subnets=subnets.value_as_list,
        )
