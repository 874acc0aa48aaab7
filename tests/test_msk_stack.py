import dataclasses

import pytest
from aws_cdk import App, Environment
from aws_cdk.assertions import Match, Template

from infrastructure.stacks.msk_cluster import KafkaCluster
from infrastructure.stacks.msk_stack import MskClusterStack
from infrastructure.validators import BrokerCountNotMultipleOfSubnets

ENV_CONFIG = Environment(account="123456789012", region="eu-central-1")


def test_parameterized_stack_wires_parameters_into_cluster() -> None:
    app = App()

    stack = MskClusterStack(app, "MskStackTest", environment_name="dev", env=ENV_CONFIG)

    template = Template.from_stack(stack)

    for name in (
        "KafkaVersion",
        "NumberOfBrokerNodes",
        "InstanceType",
        "MonitoringLevel",
        "EbsVolumeSize",
        "BrokerVpcId",
        "BrokerSubnets",
    ):
        template.has_parameter(name, Match.any_value())

    template.has_parameter(
        "KafkaVersion",
        {"Type": "String", "AllowedValues": KafkaCluster.ALLOWED_KAFKA_VERSIONS},
    )
    template.has_parameter(
        "MonitoringLevel",
        {"Type": "String", "AllowedValues": KafkaCluster.ALLOWED_MONITORING_LEVELS},
    )
    template.has_parameter("EbsVolumeSize", {"Type": "Number", "MinValue": 1, "MaxValue": 16384})
    template.has_parameter("BrokerSubnets", {"Type": "List<AWS::EC2::Subnet::Id>"})

    template.has_resource_properties(
        "AWS::MSK::Cluster",
        {
            "ClusterName": "msk-cluster-dev",
            "KafkaVersion": {"Ref": "KafkaVersion"},
            "NumberOfBrokerNodes": {"Ref": "NumberOfBrokerNodes"},
            "EnhancedMonitoring": {"Ref": "MonitoringLevel"},
            "BrokerNodeGroupInfo": {
                "ClientSubnets": {"Ref": "BrokerSubnets"},
                "InstanceType": {"Ref": "InstanceType"},
                "StorageInfo": {"EBSStorageInfo": {"VolumeSize": {"Ref": "EbsVolumeSize"}}},
            },
        },
    )
    template.has_resource_properties("AWS::EC2::SecurityGroup", {"VpcId": {"Ref": "BrokerVpcId"}})


def test_parameterized_stack_groups_parameters_in_console() -> None:
    app = App()

    stack = MskClusterStack(app, "MskStackTest", environment_name="dev", env=ENV_CONFIG)

    interface = Template.from_stack(stack).to_json()["Metadata"]["AWS::CloudFormation::Interface"]

    groups = {group["Label"]["default"]: group["Parameters"] for group in interface["ParameterGroups"]}
    assert groups["Networking configuration"] == ["BrokerVpcId", "BrokerSubnets"]
    assert "NumberOfBrokerNodes" in groups["Broker configuration"]
    assert set(interface["ParameterLabels"]) == {
        "KafkaVersion",
        "NumberOfBrokerNodes",
        "InstanceType",
        "MonitoringLevel",
        "EbsVolumeSize",
        "BrokerVpcId",
        "BrokerSubnets",
    }


def test_literal_stack_declares_no_parameters(valid_config) -> None:
    app = App()

    stack = MskClusterStack(
        app,
        "MskStackTest",
        environment_name="prod",
        cluster_config=valid_config,
        env=ENV_CONFIG,
    )

    template = Template.from_stack(stack)

    assert "KafkaVersion" not in template.to_json().get("Parameters", {})
    template.has_resource_properties(
        "AWS::MSK::Cluster",
        {
            "ClusterName": "msk-cluster-prod",
            "NumberOfBrokerNodes": 4,
            "BrokerNodeGroupInfo": {"ClientSubnets": ["subnet-a", "subnet-b"]},
        },
    )


def test_stack_exports_cluster_arn_and_security_group(valid_config) -> None:
    app = App()

    stack = MskClusterStack(
        app,
        "MskStackTest",
        environment_name="dev",
        cluster_config=valid_config,
        env=ENV_CONFIG,
    )

    template = Template.from_stack(stack)

    template.has_output("ClusterArn", {"Export": {"Name": "MskClusterArn-dev"}})
    template.has_output("SecurityGroupId", {"Export": {"Name": "MskClusterSecurityGroupId-dev"}})


def test_invalid_literal_config_aborts_stack(valid_config) -> None:
    app = App()
    bad_config = dataclasses.replace(valid_config, number_of_broker_nodes=3)

    with pytest.raises(BrokerCountNotMultipleOfSubnets, match=r"\(given 3 brokers for 2 subnets\)"):
        MskClusterStack(
            app,
            "MskStackTest",
            environment_name="dev",
            cluster_config=bad_config,
            env=ENV_CONFIG,
        )
