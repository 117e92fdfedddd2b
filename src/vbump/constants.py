"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONFIG_ERROR = 2
    CONNECTION_ERROR = 3


class SpecTypes(Enum):
    """Component kinds a version spec can declare.

    Args:
        Enum (string): Value of the ``type`` key in a version spec.
    """

    RPM = "rpm"
    IMAGE = "image"
    NPM = "npm"
    GIT = "git"
    LITERAL = "literal"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_DOCKER_HUB = "https://hub.docker.com/v2/namespaces/"
    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    DOCKER_HUB_NAMESPACE = "library"
    DOCKER_HUB_PAGE_SIZE = 100
    DOCKER_ARCHITECTURE = "amd64"
    ECR_REPO_PATTERN = r"([^.]*)\.dkr\.ecr\.([^.]*)\.amazonaws\.com"
    SUPPORTED_TYPES = [t.value for t in SpecTypes]
    OUTPUT_FORMATS = ["dotenv", "json", "yaml"]
    SPEC_FILE_NAMES = ["version-spec.yaml", "version-spec.yml"]
    LATEST_TAG = "latest"
    DIRTY_SUFFIX = "_DIRTY"
    VOOM_DATE_FORMAT = "%Y%m%d_%H%M%S"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "VBUMP_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    COMMAND_TIMEOUT = 120  # Timeout in seconds for git/aws subprocesses

    ENV_PROFILE = "PROFILE"
    ENV_ARTIFACTORY_BASE_URL = "ARTIFACTORY_BASE_URL"
    ENV_ARTIFACTORY_USERNAME = "ARTIFACTORY_USERNAME"
    ENV_ARTIFACTORY_IDENTITY_TOKEN = "ARTIFACTORY_IDENTITY_TOKEN"
