import os

import pytest

from stage_deployer.errors import RemoteCallError
from stage_deployer.project import Project

ROLE_ARN = "arn:aws:iam::123456789012:role/lambda-exec"


@pytest.fixture(scope="function", autouse=True)
def mock_env_vars():
    """Set mock environment variables to prevent accidental cloud calls."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


class FakeProvider:
    """Records every request and answers from canned responses.

    `responses` maps an operation to a response dict or to a list consumed
    one entry per call; an entry that is an exception is raised instead.
    """

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def request(self, service, operation, params, stage, region):
        self.calls.append((service, operation, dict(params), stage, region))
        answer = self.responses.get(operation, {})
        if isinstance(answer, list):
            answer = answer.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def operations(self):
        return [call[1] for call in self.calls]

    def params(self, operation):
        return [call[2] for call in self.calls if call[1] == operation]


@pytest.fixture
def throttled():
    return lambda: RemoteCallError(
        "Too Many Requests", service="APIGateway", operation="createDeployment",
        status_code=429, error_code="TooManyRequestsException")


@pytest.fixture
def project_data():
    return {
        "name": "shop",
        "variables": {"team": "payments"},
        "stages": {
            "dev": {
                "variables": {"tokenHeader": "Auth"},
                "regions": {
                    "us-east-1": {"variables": {"iamRoleArnLambda": ROLE_ARN}},
                    "eu-west-1": {"variables": {"iamRoleArnLambda": "not-an-arn"}},
                },
            }
        },
        "functions": [
            {
                "name": "auth",
                "customName": "${project}-auth",
                "authorizer": {"identitySource": "method.request.header.${tokenHeader}"},
            },
            {"name": "orders", "handler": "orders.handler"},
        ],
    }


@pytest.fixture
def project(project_data):
    return Project.from_dict(project_data)


@pytest.fixture
def fake_provider():
    return FakeProvider({
        "getAuthorizers": {"items": [{"id": "old1"}, {"id": "old2"}]},
        "getFunction": {"Configuration": {"FunctionName": "shop-auth"}},
        "createAuthorizer": {"id": "new1"},
        "createDeployment": {"id": "dep-123"},
    })
