#!/usr/bin/env python3
"""
Deploy API Gateway Stage Script

This script:
1. Loads the project definition (s-project.yaml by default)
2. Rebuilds the REST API's authorizers from the project's functions
3. Creates a deployment of the REST API to the stage

Usage: stage-deployer --rest-api-id ID [--stage STAGE] [--region REGION]
"""

import argparse
import logging
import sys

from stage_deployer import config
from stage_deployer.errors import DeployError
from stage_deployer.project import Project
from stage_deployer.provider import AWSProvider
from stage_deployer.region_deployer import endpoint_deploy_api_gateway

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Create an API Gateway deployment in a region')
    parser.add_argument('--stage', default=config.DEFAULT_STAGE,
                        help=f'Deployment stage (default: {config.DEFAULT_STAGE})')
    parser.add_argument('--region', default=config.DEFAULT_REGION,
                        help=f'AWS region (default: {config.DEFAULT_REGION})')
    parser.add_argument('--rest-api-id', required=True,
                        help='ID of the API Gateway REST API')
    parser.add_argument('--description', default=None,
                        help=f'Deployment description (default: {config.DEFAULT_DESCRIPTION})')
    parser.add_argument('--project', default=config.DEFAULT_PROJECT_FILE,
                        help=f'Project file (default: {config.DEFAULT_PROJECT_FILE})')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log every AWS call')
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    config.load_environment()
    args = build_parser().parse_args(argv)
    config.setup_logging(verbose=args.verbose)

    evt = {
        'options': {
            'stage': args.stage,
            'region': args.region,
            'restApiId': args.rest_api_id,
            'description': args.description
        },
        'data': {}
    }

    logger.info("🚀 Starting API Gateway deployment...")
    logger.info(f"Region: {args.region}")
    logger.info(f"Stage: {args.stage}")
    logger.info(f"REST API: {args.rest_api_id}")

    try:
        project = Project.load(args.project)
        evt = endpoint_deploy_api_gateway(evt, project, AWSProvider())
    except DeployError as e:
        logger.error(f"❌ Deployment failed: {e}")
        return 1

    logger.info(f"🎉 Deployment completed successfully!")
    print(evt['data']['deploymentId'])
    return 0


if __name__ == "__main__":
    sys.exit(main())
