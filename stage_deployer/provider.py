"""AWS request gateway shared by every deployment step."""

import logging
import re
from typing import Any, Dict, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from stage_deployer import config
from stage_deployer.errors import RemoteCallError

logger = logging.getLogger(__name__)

# Service names as the project refers to them -> boto3 service names
SERVICE_NAMES = {
    'APIGateway': 'apigateway',
    'Lambda': 'lambda',
}


def operation_to_method(operation: str) -> str:
    """createDeployment -> create_deployment"""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', operation).lower()


class AWSProvider:
    """Issues AWS API calls for a stage and region, one boto3 client per service and region."""

    def __init__(self, session: boto3.session.Session = None, client_config: Config = None):
        self.session = session or boto3.session.Session()
        self.client_config = client_config or Config(
            retries={'total_max_attempts': config.CLIENT_TOTAL_MAX_ATTEMPTS,
                     'mode': config.CLIENT_RETRY_MODE}
        )
        self._clients: Dict[Tuple[str, str], Any] = {}

    def get_client(self, service: str, region: str):
        """Get (or create) the client for a service in a region."""
        service_name = SERVICE_NAMES.get(service, service.lower())
        key = (service_name, region)
        if key not in self._clients:
            self._clients[key] = self.session.client(
                service_name, region_name=region, config=self.client_config)
        return self._clients[key]

    def request(self, service: str, operation: str, params: Dict[str, Any],
                stage: str, region: str) -> Dict[str, Any]:
        """Call `operation` on `service` in `region` and return the response."""
        client = self.get_client(service, region)
        method = getattr(client, operation_to_method(operation))

        logger.debug(f"{stage} - {region} - {service}.{operation}")

        try:
            return method(**params)
        except ClientError as e:
            error = e.response.get('Error', {})
            raise RemoteCallError(
                error.get('Message') or str(e),
                service=service,
                operation=operation,
                status_code=e.response.get(
                    'ResponseMetadata', {}).get('HTTPStatusCode'),
                error_code=error.get('Code')
            ) from e
        except BotoCoreError as e:
            raise RemoteCallError(str(e), service=service, operation=operation) from e
