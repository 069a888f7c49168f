"""Helpers for the ARNs used when wiring authorizers to Lambda functions."""

import re

from stage_deployer.errors import ConfigurationError

IAM_ARN_PREFIX = 'arn:aws:iam::'
ACCOUNT_NUMBER_PATTERN = re.compile(r'^\d{12}$')


def parse_account_number(role_arn: str) -> str:
    """
    Extract the AWS account number from an IAM role ARN.

    arn:aws:iam::123456789012:role/x -> 123456789012
    """
    if not isinstance(role_arn, str) or not role_arn.startswith(IAM_ARN_PREFIX):
        raise ConfigurationError(
            f"iamRoleArnLambda is not an IAM ARN: {role_arn!r}")

    account_number = role_arn[len(IAM_ARN_PREFIX):].split(':')[0]
    if not ACCOUNT_NUMBER_PATTERN.match(account_number):
        raise ConfigurationError(
            f"iamRoleArnLambda does not contain an account number: {role_arn!r}")
    return account_number


def build_authorizer_uri(region: str, account_number: str, function_name: str, stage: str) -> str:
    """Build the invocation URI API Gateway uses to call an authorizer Lambda alias."""
    return (
        f"arn:aws:apigateway:{region}:lambda:path/2015-03-31/functions/"
        f"arn:aws:lambda:{region}:{account_number}:function:{function_name}:{stage}"
        f"/invocations"
    )
