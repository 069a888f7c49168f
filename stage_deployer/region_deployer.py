"""
Endpoint Deploy API Gateway

Creates a new API Gateway deployment for one stage in one region:
1. Deletes every authorizer currently defined on the REST API
2. Recreates one authorizer per function that declares `authorizer` settings
3. Creates the stage deployment, waiting out 'Too many requests' responses

Multi-region runs call this once per region.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from stage_deployer import config
from stage_deployer.arns import build_authorizer_uri, parse_account_number
from stage_deployer.errors import ConfigurationError, RemoteCallError
from stage_deployer.project import FunctionDefinition, Project

logger = logging.getLogger(__name__)


@dataclass
class InvocationContext:
    """Options of one region deployment."""

    stage: str
    region: str
    rest_api_id: str
    aws_account_number: str
    description: str = config.DEFAULT_DESCRIPTION

    @classmethod
    def from_options(cls, options: Dict[str, Any], project: Project) -> 'InvocationContext':
        """Validate the invocation options and derive the account number."""
        for key in ('stage', 'region', 'restApiId'):
            value = options.get(key)
            if not value or not isinstance(value, str):
                raise ConfigurationError(f"Missing required option: {key}")

        stage = options['stage']
        region = options['region']
        variables = project.get_region(stage, region).get_variables()
        role_arn = variables.get('iamRoleArnLambda')
        if not role_arn:
            raise ConfigurationError(
                f"iamRoleArnLambda is not set for {stage} - {region}")

        return cls(
            stage=stage,
            region=region,
            rest_api_id=options['restApiId'],
            aws_account_number=parse_account_number(role_arn),
            description=options.get('description') or config.DEFAULT_DESCRIPTION
        )


class RegionDeployer:
    """Rebuilds authorizers and creates the API Gateway deployment for one region."""

    def __init__(self, project: Project, provider, context: InvocationContext,
                 sleep: Optional[Callable[[float], None]] = None):
        self.project = project
        self.provider = provider
        self.context = context
        self.sleep = sleep or time.sleep
        self.deployment: Optional[Dict[str, Any]] = None

    def _request(self, service: str, operation: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return self.provider.request(
            service, operation, params, self.context.stage, self.context.region)

    def _label(self) -> str:
        return f"{self.context.stage} - {self.context.region}"

    # Authorizers

    def reconcile_authorizers(self) -> List[Dict[str, Any]]:
        """Replace every authorizer on the REST API with the project's authorizers."""
        ctx = self.context
        logger.info(f"{self._label()} - REST API: rebuilding authorizers on {ctx.rest_api_id}")

        # Only the first page is read
        response = self._request('APIGateway', 'getAuthorizers', {
            'restApiId': ctx.rest_api_id,
            'limit': config.AUTHORIZER_PAGE_SIZE
        })
        existing = response.get('items', [])

        for authorizer in existing:
            self._request('APIGateway', 'deleteAuthorizer', {
                'restApiId': ctx.rest_api_id,
                'authorizerId': authorizer['id']
            })
            logger.debug(f"{self._label()} - REST API: deleted authorizer {authorizer['id']}")

        created = []
        for function in self.project.get_all_functions():
            # No authorizer data, skip
            if not function.authorizer:
                continue
            created.append(self._create_authorizer(function))

        logger.info(
            f"✅ {self._label()} - REST API: removed {len(existing)} authorizer(s), "
            f"created {len(created)}")
        return created

    def _create_authorizer(self, function: FunctionDefinition) -> Dict[str, Any]:
        ctx = self.context
        populated = function.to_object_populated(ctx.stage, ctx.region)
        function_name = populated.deployed_name

        # The alias must exist before API Gateway can invoke it
        self._request('Lambda', 'getFunction', {
            'FunctionName': function_name,
            'Qualifier': ctx.stage
        })

        if not populated.authorizer.get('identitySource'):
            raise ConfigurationError(
                f"Authorizer is missing identitySource property in function {populated.name}")

        params = self.build_authorizer_params(populated)
        response = self._request('APIGateway', 'createAuthorizer', params)
        logger.debug(
            f"{self._label()} - REST API: created authorizer {params['name']} "
            f"for function {function_name}")
        return response

    def build_authorizer_params(self, function: FunctionDefinition) -> Dict[str, Any]:
        """createAuthorizer parameters for a populated function."""
        ctx = self.context
        params = dict(function.authorizer)
        params['restApiId'] = ctx.rest_api_id
        params['name'] = params.get('name') or function.deployed_name
        params['type'] = params.get('type') or config.DEFAULT_AUTHORIZER_TYPE
        params['authorizerUri'] = build_authorizer_uri(
            ctx.region, ctx.aws_account_number, function.deployed_name, ctx.stage)
        return params

    # Deployment

    def build_deployment_params(self) -> Dict[str, Any]:
        ctx = self.context
        return {
            'restApiId': ctx.rest_api_id,
            'stageName': ctx.stage,
            'description': ctx.description,
            'stageDescription': ctx.stage,
            'variables': {
                'functionAlias': ctx.stage
            }
        }

    def create_deployment(self) -> Dict[str, Any]:
        """Create the stage deployment, retrying every 60 seconds while throttled."""
        params = self.build_deployment_params()

        while True:
            try:
                response = self._request('APIGateway', 'createDeployment', params)
                break
            except RemoteCallError as e:
                if e.status_code != config.THROTTLE_STATUS_CODE:
                    raise
                logger.debug(
                    f"'Too many requests' received, sleeping "
                    f"{config.THROTTLE_RETRY_SECONDS} seconds")
                self.sleep(config.THROTTLE_RETRY_SECONDS)

        self.deployment = response
        logger.debug(
            f"{self._label()} - REST API: created API Gateway deployment: {response['id']}")
        return response

    def deploy(self) -> str:
        """Rebuild authorizers, then create the deployment. Returns the deployment id."""
        self.reconcile_authorizers()
        deployment = self.create_deployment()
        return deployment['id']


def endpoint_deploy_api_gateway(evt: Dict[str, Any], project: Project, provider,
                                sleep: Optional[Callable[[float], None]] = None) -> Dict[str, Any]:
    """
    Deploy one region for an invocation event.

    `evt['options']` carries stage, region, restApiId and an optional
    description. The deployment id is returned in `evt['data']['deploymentId']`.
    """
    context = InvocationContext.from_options(evt.get('options') or {}, project)
    deployer = RegionDeployer(project, provider, context, sleep=sleep)
    deployment_id = deployer.deploy()

    if not evt.get('data'):
        evt['data'] = {}
    evt['data']['deploymentId'] = deployment_id
    return evt
