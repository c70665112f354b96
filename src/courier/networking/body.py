"""Request body encodings.

A request carries at most one body: form fields, a JSON document or a list of
multipart parts. Each encoding is its own dataclass so the compiled request
holds exactly one active variant.
"""

from __future__ import annotations

import dataclasses
import json
import secrets
from dataclasses import dataclass, field
from typing import IO, Any, Mapping, Union
from urllib.parse import urlencode

from urllib3.fields import RequestField, guess_content_type
from urllib3.filepost import encode_multipart_formdata

from .errors import InputValidationError
from .merge import has_key, set_key

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"

BOUNDARY_ALPHABET = (
    "-_1234567890abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
)
BOUNDARY_LENGTH = 30

PartContents = Union[str, bytes, IO[bytes]]


@dataclass(frozen=True)
class EncodedBody:
    """Serialized body plus the content type it implies."""

    content: bytes | None
    content_type: str | None


@dataclass
class FormBody:
    fields: dict[str, Any] = field(default_factory=dict)

    def encode(self) -> EncodedBody:
        return EncodedBody(
            content=urlencode(self.fields, doseq=True).encode("utf-8"),
            content_type=FORM_CONTENT_TYPE,
        )


@dataclass
class JsonBody:
    text: str

    def encode(self) -> EncodedBody:
        return EncodedBody(
            content=self.text.encode("utf-8"),
            content_type=JSON_CONTENT_TYPE,
        )


@dataclass
class MultipartPart:
    """One named section of a multipart body."""

    name: str
    contents: PartContents
    headers: Mapping[str, str] = field(default_factory=dict)
    filename: str | None = None

    def to_field(self) -> RequestField:
        data = self.contents
        if not isinstance(data, (str, bytes)):
            data = data.read()
        headers = dict(self.headers)
        content_type = None
        for key in list(headers):
            if key.lower() == "content-type":
                content_type = headers.pop(key)
        if content_type is None and self.filename:
            content_type = guess_content_type(self.filename)
        request_field = RequestField(
            name=self.name,
            data=data,
            filename=self.filename,
            headers=headers,
        )
        request_field.make_multipart(content_type=content_type)
        return request_field


@dataclass
class MultipartBody:
    parts: list[MultipartPart] = field(default_factory=list)

    def encode(self, boundary: str | None = None) -> EncodedBody:
        boundary = boundary or generate_multipart_boundary()
        content, content_type = encode_multipart_formdata(
            [part.to_field() for part in self.parts], boundary=boundary
        )
        return EncodedBody(content=content, content_type=content_type)


Body = Union[FormBody, JsonBody, MultipartBody]


def generate_multipart_boundary() -> str:
    """Return a fresh random multipart boundary token."""
    return "".join(
        secrets.choice(BOUNDARY_ALPHABET) for _ in range(BOUNDARY_LENGTH)
    )


def encode_json_value(value: Any) -> str:
    """Return ``value`` as JSON text suitable for a request body.

    Mappings, sequences and dataclass instances are serialized. Strings must
    already hold a JSON object or array and are passed through untouched.

    Raises:
        InputValidationError: ``value`` is neither serializable nor valid
            JSON text.
    """
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            decoded = None
        if not isinstance(decoded, (dict, list)):
            raise InputValidationError(
                "Only a valid json string, array and object is accepted"
            )
        return value

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    if isinstance(value, Mapping):
        value = dict(value)
    elif not isinstance(value, (list, tuple)):
        raise InputValidationError(
            "Only a valid json string, array and object is accepted"
        )
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as exc:
        raise InputValidationError("Cannot encode value.") from exc


def select_body(
    form: FormBody | None,
    json_body: JsonBody | None,
    multipart: MultipartBody | None,
) -> Body | None:
    """Return the single populated body variant, or None for no body.

    Raises:
        InputValidationError: more than one variant is populated.
    """
    populated = [body for body in (form, json_body, multipart) if body is not None]
    if len(populated) > 1:
        raise InputValidationError(
            "You cannot use form, json and multipart at the same time."
        )
    return populated[0] if populated else None


def apply_content_type(headers: dict[str, Any], content_type: str | None) -> None:
    """Set Content-Type unless the caller already chose one."""
    if content_type and not has_key(headers, "content-type"):
        set_key(headers, "Content-Type", content_type)


def encode_body(body: Body | None, headers: dict[str, Any]) -> bytes | None:
    """Encode ``body`` and apply its content type hint to ``headers``."""
    if body is None:
        return None
    encoded = body.encode()
    apply_content_type(headers, encoded.content_type)
    return encoded.content
