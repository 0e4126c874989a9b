"""
Type Mapper: conversion between Beacon API JSON and typed values.

Decoding goes through pydantic `TypeAdapter`s built from the wire types, so
quoted integers stay exact, hex byte strings are length-checked, unknown
fields are ignored and missing fields fail. Every failure is reported as a
`DecodeError` carrying the offending fragment.

Encoding is the inverse: typed values become the JSON-compatible values (or
query strings) the API expects.


FORK DISCRIMINANTS
------------------
A fork-dependent response is decoded with the variant selected by an
explicit fork name. Up to three sources may name the fork:

1. The caller, when it already knows the fork.
2. The `Eth-Consensus-Version` response header.
3. The `version` field embedded in the response body.

Every source that is present must agree. If none is present the response
cannot be decoded: the mapper never infers a fork from which fields happen
to be present.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Set
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from pydantic import BaseModel, TypeAdapter, ValidationError

from beacon_api_client.consensus import ForkName, UnknownForkError, UnsupportedForkError
from beacon_api_client.types import BaseBitlist, BaseBitvector, BaseUint
from beacon_api_client.types.byte_arrays import encode_hex

from .errors import DecodeError, HttpStatusError
from .models import ErrorMessage, Versioned

if TYPE_CHECKING:
    from .endpoints import EndpointDescriptor

VERSION_HEADER = "Eth-Consensus-Version"
"""Response (and request) header naming the fork of a versioned body."""


@lru_cache(maxsize=None)
def adapter_for(target: Any) -> TypeAdapter[Any]:
    """Return a cached pydantic adapter for `target`."""
    return TypeAdapter(target)


def type_name(target: Any) -> str:
    """Readable name of a decode target, for error messages."""
    return getattr(target, "__name__", None) or str(target)


def _describe(exc: ValidationError) -> tuple[str, Any]:
    """Summarize a validation error as (detail, offending input)."""
    first = exc.errors(include_url=False)[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    detail = f"{location}: {first['msg']}"
    if exc.error_count() > 1:
        detail = f"{detail} (and {exc.error_count() - 1} more errors)"
    return detail, first.get("input")


def decode(
    target: Any,
    raw: Any,
    *,
    context: str | None = None,
    endpoint: str | None = None,
) -> Any:
    """
    Validate parsed JSON against `target`.

    Args:
        target: A wire type, model, or typing construct (e.g. `tuple[Foo, ...]`).
        raw: Parsed JSON.
        context: Name used in error messages; defaults to the type name.
        endpoint: Endpoint name attached to errors.

    Raises:
        DecodeError: If the value does not match the target shape.
    """
    try:
        return adapter_for(target).validate_python(raw)
    except ValidationError as exc:
        detail, fragment = _describe(exc)
        raise DecodeError(
            context or type_name(target), detail, raw_fragment=_dump(fragment), endpoint=endpoint
        ) from exc


def parse_json(body: bytes | str, *, context: str, endpoint: str | None = None) -> Any:
    """
    Parse a JSON document.

    Integers are parsed exactly; there is no float round trip.

    Raises:
        DecodeError: If the body is not valid JSON.
    """
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(
            context, f"invalid JSON: {exc}", raw_fragment=body, endpoint=endpoint
        ) from exc


def _dump(fragment: Any) -> str:
    if isinstance(fragment, str):
        return fragment
    try:
        return json.dumps(fragment)
    except (TypeError, ValueError):
        return repr(fragment)


def resolve_fork(
    *,
    caller: ForkName | str | None = None,
    header: str | None = None,
    embedded: Any = None,
    context: str,
    endpoint: str | None = None,
) -> ForkName:
    """
    Determine the fork of a fork-dependent value from explicit discriminants.

    Raises:
        DecodeError: If no discriminant is present, one names an unknown
            fork, or two of them disagree.
    """
    sources = {"caller": caller, "header": header, "body": embedded}
    forks: dict[str, ForkName] = {}
    for source, value in sources.items():
        if value is None:
            continue
        try:
            forks[source] = ForkName.parse(value)
        except UnknownForkError as exc:
            raise DecodeError(
                context, f"unknown fork {value!r} in {source}", endpoint=endpoint
            ) from exc

    if not forks:
        raise DecodeError(context, "no fork discriminant available", endpoint=endpoint)

    if len(set(forks.values())) > 1:
        named = ", ".join(f"{source}={fork}" for source, fork in forks.items())
        raise DecodeError(context, f"conflicting fork discriminants ({named})", endpoint=endpoint)

    return next(iter(forks.values()))


def _optional_flag(document: Mapping[str, Any], key: str, *, context: str) -> bool | None:
    value = document.get(key)
    if value is None or isinstance(value, bool):
        return value
    raise DecodeError(context, f"{key} must be a boolean", raw_fragment=_dump(value))


def decode_response(
    endpoint: EndpointDescriptor,
    body: bytes | str,
    *,
    header_version: str | None = None,
    fork: ForkName | None = None,
) -> Any:
    """
    Decode the body of a successful response to `endpoint`.

    Returns:
        The decoded data, or a `Versioned` wrapper for fork-dependent
        endpoints. `None` for endpoints without a response body.

    Raises:
        DecodeError: If the body does not match the endpoint's shape.
    """
    if endpoint.response is None and endpoint.versioned is None:
        return None

    context = endpoint.response_name
    document = parse_json(body, context=context, endpoint=endpoint.name)

    if endpoint.versioned is None and not endpoint.unwrap:
        return decode(endpoint.response, document, context=context, endpoint=endpoint.name)

    if not isinstance(document, dict):
        raise DecodeError(
            context, "expected a JSON object", raw_fragment=body, endpoint=endpoint.name
        )
    if "data" not in document:
        raise DecodeError(
            context, "missing 'data' field", raw_fragment=body, endpoint=endpoint.name
        )

    if endpoint.versioned is None:
        return decode(endpoint.response, document["data"], context=context, endpoint=endpoint.name)

    version = resolve_fork(
        caller=fork,
        header=header_version,
        embedded=document.get("version"),
        context=context,
        endpoint=endpoint.name,
    )
    try:
        variant = endpoint.versioned.select(version)
    except UnsupportedForkError as exc:
        raise DecodeError(context, str(exc), endpoint=endpoint.name) from exc

    target = tuple[variant, ...] if endpoint.many else variant
    data = decode(target, document["data"], context=context, endpoint=endpoint.name)

    return Versioned(
        version=version,
        data=data,
        execution_optimistic=_optional_flag(document, "execution_optimistic", context=context),
        finalized=_optional_flag(document, "finalized", context=context),
    )


def status_error(code: int, body: bytes | str, *, endpoint: str | None = None) -> HttpStatusError:
    """
    Build the error for a non-2xx response.

    The structured error body is used when it parses; the raw text is kept
    either way.
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    try:
        message = ErrorMessage.model_validate_json(text)
    except ValidationError:
        return HttpStatusError(code, text, endpoint=endpoint)
    return HttpStatusError(
        code,
        text,
        server_message=message.message,
        failures=message.failures,
        endpoint=endpoint,
    )


def encode(value: Any) -> Any:
    """
    Encode a typed value into its JSON-compatible wire form.

    Integers are quoted, byte strings become `0x` hex, bitfields become the
    hex of their SSZ encoding, enums become their value. Containers recurse.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (BaseBitlist, BaseBitvector)):
        return value.to_wire()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, (bytes, bytearray)):
        return encode_hex(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return {str(key): encode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, Set)):
        return [encode(item) for item in value]
    raise TypeError(f"Cannot encode {type(value).__name__} for the wire")


def encode_scalar(value: Any) -> str:
    """Encode a single query or path value as a string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, BaseUint):
        return value.to_wire()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return encode_hex(value)
    if isinstance(value, str):
        return value
    raise TypeError(f"Cannot encode {type(value).__name__} as a query value")


def encode_query(params: Mapping[str, Any]) -> list[tuple[str, str]]:
    """
    Encode query parameters.

    `None` values and empty collections are dropped. Collections are joined
    with commas; sets are sorted so the query is deterministic.
    """
    query: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, Set)):
            items = [encode_scalar(item) for item in value]
            if isinstance(value, Set):
                items.sort()
            if items:
                query.append((key, ",".join(items)))
            continue
        query.append((key, encode_scalar(value)))
    return query


def encode_path(template: str, values: Mapping[str, Any]) -> str:
    """
    Substitute and URL-quote path parameters into `template`.

    Raises:
        ValueError: If the template names a parameter missing from `values`.
    """
    quoted = {key: quote(encode_scalar(value), safe="") for key, value in values.items()}
    try:
        return template.format_map(quoted)
    except KeyError as exc:
        raise ValueError(f"Missing path parameter {exc.args[0]!r} for {template}") from exc

