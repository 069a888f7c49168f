"""
Stage Deployer

Creates an API Gateway stage deployment for one region and rebuilds the
request authorizers declared by the project's functions.
"""

from stage_deployer.errors import ConfigurationError, DeployError, RemoteCallError
from stage_deployer.region_deployer import (
    InvocationContext,
    RegionDeployer,
    endpoint_deploy_api_gateway,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DeployError",
    "InvocationContext",
    "RegionDeployer",
    "RemoteCallError",
    "endpoint_deploy_api_gateway",
]
