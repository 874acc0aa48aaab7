"""AWS CDK Application for the MSK cluster infrastructure."""

import sys
from pathlib import Path
from typing import Any, Mapping, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from aws_cdk import App, Tags

from infrastructure.config import (
    configure_logging,
    get_environment,
    get_environment_name,
    load_cluster_config,
)
from infrastructure.stacks.msk_stack import MskClusterStack


def create_app(context: Optional[Mapping[str, Any]] = None) -> App:
    """
    Create and configure the CDK App.

    Args:
        context: Extra context values (merged over cdk.json / --context)

    Returns:
        Configured CDK App instance

    Raises:
        ConfigError: If the kafka_cluster context is malformed
        ClusterConfigError: If the kafka_cluster context violates an MSK constraint
    """
    app = App(context=dict(context) if context else None)

    # Global tags applied to all stacks in this app
    Tags.of(app).add("Project", "msk-cluster")
    Tags.of(app).add("ManagedBy", "CDK")

    environment_name = get_environment_name(app)

    MskClusterStack(
        app,
        f"MskCluster-{environment_name}",
        environment_name=environment_name,
        cluster_config=load_cluster_config(app),
        env=get_environment(),
        description=f"Amazon MSK cluster ({environment_name})",
    )

    return app


if __name__ == "__main__":
    configure_logging()
    create_app().synth()
