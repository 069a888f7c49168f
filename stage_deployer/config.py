"""Configuration constants and logging setup."""

import logging
import os

from dotenv import load_dotenv

# Configuration
DEFAULT_STAGE = os.environ.get("STAGE_DEPLOYER_STAGE", "dev")
DEFAULT_REGION = os.environ.get("STAGE_DEPLOYER_REGION", "us-east-1")
DEFAULT_PROJECT_FILE = os.environ.get(
    "STAGE_DEPLOYER_PROJECT_FILE", "s-project.yaml")
DEFAULT_LOG_LEVEL = os.environ.get("STAGE_DEPLOYER_LOG_LEVEL", "INFO")

DEFAULT_DESCRIPTION = "Serverless deployment"
DEFAULT_AUTHORIZER_TYPE = "TOKEN"
AUTHORIZER_PAGE_SIZE = 100

# API Gateway answers 429 when the account's createDeployment rate is exceeded
THROTTLE_STATUS_CODE = 429
THROTTLE_RETRY_SECONDS = 60

# One attempt per call: only createDeployment throttling is retried, by RegionDeployer
CLIENT_TOTAL_MAX_ATTEMPTS = 1
CLIENT_RETRY_MODE = "standard"

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def load_environment() -> None:
    """Load a .env file and refresh the environment-driven defaults."""
    global DEFAULT_STAGE, DEFAULT_REGION, DEFAULT_PROJECT_FILE, DEFAULT_LOG_LEVEL

    load_dotenv()
    DEFAULT_STAGE = os.environ.get("STAGE_DEPLOYER_STAGE", DEFAULT_STAGE)
    DEFAULT_REGION = os.environ.get("STAGE_DEPLOYER_REGION", DEFAULT_REGION)
    DEFAULT_PROJECT_FILE = os.environ.get(
        "STAGE_DEPLOYER_PROJECT_FILE", DEFAULT_PROJECT_FILE)
    DEFAULT_LOG_LEVEL = os.environ.get(
        "STAGE_DEPLOYER_LOG_LEVEL", DEFAULT_LOG_LEVEL)


def setup_logging(level: str = None, verbose: bool = False) -> None:
    """Configure the root logger the same way for every entry point."""
    if verbose:
        level = "DEBUG"
    level = (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT
    )
