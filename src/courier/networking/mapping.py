"""Mapping of responses onto caller-defined response models."""

from __future__ import annotations

import inspect
import typing
from types import SimpleNamespace
from typing import Any, Callable, TypeVar

import requests

from .errors import DecodeError, InputValidationError, MappingError
from .response import decode_json, decode_response

Result = TypeVar("Result")
Destination = Callable[[], "ResponseModel"]


class ResponseModel:
    """Base class for typed response wrappers.

    Subclasses add domain accessors on top of the raw response; a mapping
    callback declares the subclass it expects as its single parameter type.
    """

    def __init__(self, response: requests.Response | None = None) -> None:
        self._http_response = response

    def set_http_response(self, response: requests.Response) -> ResponseModel:
        self._http_response = response
        return self

    def get_http_response(self) -> requests.Response | None:
        return self._http_response

    def is_ok(self) -> bool:
        """Return True when the reason phrase is ``OK``."""
        if self._http_response is None:
            return False
        return self._http_response.reason == "OK"

    def get_code(self) -> int:
        if self._http_response is None:
            return 0
        return self._http_response.status_code

    def get_raw_response(self) -> str:
        if self._http_response is None:
            return ""
        return self._http_response.text

    def get_object_response(self) -> SimpleNamespace | None:
        """Return the JSON body as an object, or None if it is not one."""
        if self._http_response is None:
            return None
        try:
            decoded = decode_response(self._http_response)
        except DecodeError:
            return None
        return decoded if isinstance(decoded, SimpleNamespace) else None

    def get_array_response(self) -> dict[str, Any] | list[Any]:
        """Return the JSON body as dicts and lists, or an empty dict."""
        try:
            decoded = decode_json(self.get_raw_response(), assoc=True)
        except ValueError:
            return {}
        return decoded if isinstance(decoded, (dict, list)) else {}


def resolve_destination(
    callback: Callable[..., Any], factory: Destination | None = None
) -> Destination:
    """Return the factory producing the model ``callback`` expects.

    Without an explicit ``factory`` the callback's single parameter
    annotation is used.

    Raises:
        InputValidationError: no destination can be determined, or it is not
            a ResponseModel.
    """
    if factory is None:
        factory = _annotated_destination(callback)
    if isinstance(factory, type) and not issubclass(factory, ResponseModel):
        raise InputValidationError(
            f"{factory.__name__} is not a ResponseModel"
        )
    if not callable(factory):
        raise InputValidationError("response model factory is not callable")
    return factory


def _annotated_destination(callback: Callable[..., Any]) -> type:
    try:
        signature = inspect.signature(callback)
    except (TypeError, ValueError) as exc:
        raise InputValidationError(
            "cannot inspect the mapping callback"
        ) from exc
    parameters = [
        parameter
        for parameter in signature.parameters.values()
        if parameter.kind
        in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD)
    ]
    if len(parameters) != 1:
        raise InputValidationError(
            "mapping callback must take exactly one parameter"
        )
    parameter = parameters[0]

    target = callback
    if not (inspect.isfunction(callback) or inspect.ismethod(callback)):
        target = getattr(callback, "__call__", callback)
    try:
        hints = typing.get_type_hints(target)
    except NameError as exc:
        # Classes local to a function are not visible from the callback's globals.
        raise InputValidationError(
            f"cannot resolve the annotation of '{parameter.name}' ({exc}); "
            "pass the response model as factory"
        ) from exc
    except TypeError:
        hints = {}
    annotation = hints.get(parameter.name, parameter.annotation)
    if not isinstance(annotation, type):
        raise InputValidationError(
            "mapping callback parameter has no response model type; "
            "annotate it or pass a factory"
        )
    return annotation


def map_response(
    response: requests.Response,
    callback: Callable[[Any], Result],
    destination: Destination,
) -> Result:
    """Build the destination model around ``response`` and invoke ``callback``.

    Raises:
        InputValidationError: the factory did not produce a ResponseModel.
        MappingError: the callback failed with a type mismatch.
    """
    model = destination()
    if not isinstance(model, ResponseModel):
        raise InputValidationError(
            f"{type(model).__name__} is not a ResponseModel"
        )
    model.set_http_response(response)
    try:
        return callback(model)
    except TypeError as exc:
        raise MappingError(exc) from exc
