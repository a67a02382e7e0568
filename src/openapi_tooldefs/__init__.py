import os

from dotenv import find_dotenv, load_dotenv

if not os.environ.get("OPENAPI_TOOLDEFS_ENV_LOADED"):
    load_dotenv(find_dotenv(usecwd=True))
    os.environ["OPENAPI_TOOLDEFS_ENV_LOADED"] = "1"

from openapi_tooldefs.errors import (  # noqa: E402
    ConfigurationError,
    MalformedSpecError,
    OpenAPIError,
    OperationSkipped,
    ToolDefsError,
)
from openapi_tooldefs.logging import configure_logging, get_logger  # noqa: E402
from openapi_tooldefs.openapi import (  # noqa: E402
    ExecutionParameter,
    ExtractionOptions,
    ExtractionReport,
    ToolDescriptor,
    dereference,
    extract,
    extract_report,
    load_openapi,
    render,
)
from openapi_tooldefs.settings import Settings  # noqa: E402

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Errors
    "ToolDefsError",
    "ConfigurationError",
    "OpenAPIError",
    "MalformedSpecError",
    "OperationSkipped",
    # Logging / config
    "configure_logging",
    "get_logger",
    "Settings",
    # Extraction
    "load_openapi",
    "dereference",
    "extract",
    "extract_report",
    "render",
    "ExecutionParameter",
    "ExtractionOptions",
    "ExtractionReport",
    "ToolDescriptor",
]
