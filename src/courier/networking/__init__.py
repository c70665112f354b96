"""Request composition and response mapping on top of requests."""

from .body import (
    FormBody,
    JsonBody,
    MultipartBody,
    MultipartPart,
    generate_multipart_boundary,
)
from .client import HttpClient
from .config import DEFAULT_USER_AGENT, HttpClientConfig, load_client_config
from .cookies import FileCookieJar, get_cookie_by_name
from .errors import (
    DecodeError,
    HttpClientError,
    InputValidationError,
    MappingError,
    TransportError,
)
from .handlers import HandlerStack, MockAdapter
from .mapping import ResponseModel, map_response, resolve_destination
from .merge import merge_options
from .params import normalize_params, normalize_value
from .request import CompiledRequest, RequestBuilder
from .response import decode_response, is_json_content_type

__all__ = [
    "DEFAULT_USER_AGENT",
    "CompiledRequest",
    "DecodeError",
    "FileCookieJar",
    "FormBody",
    "HandlerStack",
    "HttpClient",
    "HttpClientConfig",
    "HttpClientError",
    "InputValidationError",
    "JsonBody",
    "MappingError",
    "MockAdapter",
    "MultipartBody",
    "MultipartPart",
    "RequestBuilder",
    "ResponseModel",
    "TransportError",
    "decode_response",
    "generate_multipart_boundary",
    "get_cookie_by_name",
    "is_json_content_type",
    "load_client_config",
    "map_response",
    "merge_options",
    "normalize_params",
    "normalize_value",
    "resolve_destination",
]
