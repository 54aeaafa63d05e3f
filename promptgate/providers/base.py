"""Base adapter interface for promptgate.

An adapter is a pair of pure functions: ``prepare`` turns a resolved
request into the vendor wire request and ``parse`` turns the decoded vendor
body into a :class:`CanonicalResponse`. Adapters never perform I/O.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from promptgate.config import ProviderSettings
from promptgate.types import CanonicalResponse, ResolvedRequest


@dataclass
class PreparedRequest:
    """Vendor request ready to hand to the transport."""

    url: str
    headers: dict[str, str]
    payload: dict[str, Any]
    params: dict[str, str] = field(default_factory=dict)
    method: str = "POST"


PrepareFn = Callable[[ResolvedRequest, ProviderSettings], PreparedRequest]
ParseFn = Callable[[dict[str, Any], str, int], CanonicalResponse]


@dataclass(frozen=True)
class ProviderAdapter:
    """Tagged adapter variant.

    Attributes:
        name: Provider identifier (``openai``, ``claude``, ...)
        prepare: Builds the vendor request
        parse: Builds the canonical response; must not raise
        default_base_url: Base URL used when settings leave it empty
    """

    name: str
    prepare: PrepareFn
    parse: ParseFn
    default_base_url: str = ""


def pick_options(options: dict[str, Any], allowed: Iterable[str]) -> dict[str, Any]:
    """Keep the allowed option keys, dropping None values."""
    return {key: options[key] for key in allowed if options.get(key) is not None}


def as_int(value: Any) -> int:
    """Coerce a vendor token count, treating garbage as zero."""
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def vendor_error(raw: dict[str, Any]) -> Optional[str]:
    """Extract an error object embedded in an otherwise successful body."""
    error = raw.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or error.get("type") or error)
    if isinstance(error, str) and error:
        return error
    return None


def stop_list(options: dict[str, Any]) -> Optional[list[str]]:
    """Normalize ``stop``/``stop_sequences`` to a list."""
    stop = options.get("stop_sequences", options.get("stop"))
    if stop is None:
        return None
    if isinstance(stop, str):
        return [stop]
    return [str(s) for s in stop]
