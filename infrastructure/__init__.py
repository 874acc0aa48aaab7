# MSK Cluster - Infrastructure Package
#
# Avoid importing the CDK app (or stacks) at package import time.
# CDK executes `infrastructure/app.py` directly (see `cdk.json`).

__all__ = []
