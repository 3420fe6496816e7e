import os
from typing import Optional

from dotenv import load_dotenv
from distributor.errors import MissingEnvironmentVariableException

load_dotenv()


def env_var(accessor: str) -> str:
    """
    Attempt to fetch an environment variable and throw
    an error if not found
    """
    var = os.environ.get(accessor)
    if not var:
        raise MissingEnvironmentVariableException(accessor)
    return var


def optional_env_var(accessor: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(accessor) or default


class DOMAIN:
    NAME = "DISTRIBUTOR_NAME"
    VERSION = "DISTRIBUTOR_VERSION"
    CHAIN_ID = "CHAIN_ID"
    VERIFYING_CONTRACT = "VERIFYING_CONTRACT"


class SETTLEMENT:
    RPC_URL = "RPC_URL"
    TOKEN_ADDRESS = "TOKEN_ADDRESS"
    SENDER_KEY = "SENDER_PRIVATE_KEY"
    REGISTRY_PATH = "REGISTRY_PATH"
