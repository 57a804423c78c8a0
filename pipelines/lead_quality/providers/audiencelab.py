"""
AudienceLab audience provider client.

Creates an audience from a targeting request and pages through its
members. Retry, backoff and polling belong to the caller: every failure
surfaces as a typed exception whose safe context carries status codes,
endpoints, request ids and response shapes, never secrets or contact data.
"""

import os
import re
import time
import uuid
from typing import Any, Dict, List, Mapping, Optional

import requests
from dotenv import load_dotenv

from core.contracts.leads import ScopeContext
from core.logger import get_logger
from pipelines.lead_quality.utils.intent_packs import (
    build_packed_keywords,
    map_tier_to_intent_strength,
    resolve_intent_pack,
)

load_dotenv()
logger = get_logger(__name__)

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

PROVIDER_NAME = "audiencelab"
AUDIENCELAB_API_KEY = os.getenv("AUDIENCELAB_API_KEY")
AUDIENCELAB_BASE_URL = os.getenv("AUDIENCELAB_BASE_URL", "https://api.audiencelab.io")
MOCK_PROVIDER = os.getenv("MOCK_PROVIDER", "").lower() in ("true", "1", "yes")
DEFAULT_TIMEOUT = 30

# Member paging
PAGE_SIZE = 50
MAX_PAGES = 10
DEFAULT_MAX_CONTACTS = PAGE_SIZE * MAX_PAGES

# Payload limits
MAX_LOCATION_HINTS = 5
AUDIENCE_NAME_MAX_CHARS = 50

AUDIENCES_ENDPOINT = "/audiences"
REQUEST_ID_HEADER = "x-request-id"

ID_KEYS = ("id", "audience_id", "audienceId", "_id", "Id", "ID")
LOCATION_ID_PATTERN = re.compile(r"/audiences/([a-zA-Z0-9_-]+)")
ERROR_CODE_PATTERN = re.compile(r"error|fail", re.IGNORECASE)

SHAPE_MAX_DEPTH = 2
SHAPE_MAX_KEYS = 10

# Embedded city/state hints for common ZIPs
ZIP_LOOKUP = {
    "33101": {"city": "Miami", "state": "FL"},
    "33130": {"city": "Miami", "state": "FL"},
    "33139": {"city": "Miami Beach", "state": "FL"},
    "90210": {"city": "Beverly Hills", "state": "CA"},
    "10001": {"city": "New York", "state": "NY"},
    "60601": {"city": "Chicago", "state": "IL"},
    "77001": {"city": "Houston", "state": "TX"},
    "85001": {"city": "Phoenix", "state": "AZ"},
    "19101": {"city": "Philadelphia", "state": "PA"},
    "78201": {"city": "San Antonio", "state": "TX"},
    "92101": {"city": "San Diego", "state": "CA"},
    "75201": {"city": "Dallas", "state": "TX"},
}


# =============================================================================
# TYPED ERRORS
# =============================================================================

class AudienceLabError(RuntimeError):
    """Base class for provider failures. Subclasses define code and context."""

    code = "AUDIENCELAB_ERROR"

    def __init__(
        self,
        message: str,
        endpoint: str,
        method: str,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.method = method
        self.request_id = request_id

    def to_safe_context(self) -> Dict[str, Any]:
        context: Dict[str, Any] = {
            "code": self.code,
            "endpoint": self.endpoint,
            "method": self.method,
        }
        if self.request_id:
            context["request_id"] = self.request_id
        return context


class AudienceLabAuthError(AudienceLabError):
    """401/403 from the provider."""

    code = "AUDIENCELAB_UNAUTHORIZED"
    hint = (
        "Invalid key, wrong workspace, revoked key, or missing permissions "
        "(WRITE required for create)."
    )

    def __init__(self, status: int, endpoint: str, method: str, request_id: Optional[str] = None) -> None:
        super().__init__(f"AudienceLab {status}: {self.hint}", endpoint, method, request_id)
        self.status = status

    def to_safe_context(self) -> Dict[str, Any]:
        context = super().to_safe_context()
        context.update({"status": self.status, "hint": self.hint})
        return context


class AudienceLabUpstreamError(AudienceLabError):
    """5xx from the provider."""

    code = "AUDIENCELAB_UPSTREAM_ERROR"

    def __init__(self, status: int, endpoint: str, method: str, request_id: Optional[str] = None) -> None:
        super().__init__(f"AudienceLab upstream error {status}", endpoint, method, request_id)
        self.status = status

    def to_safe_context(self) -> Dict[str, Any]:
        context = super().to_safe_context()
        context["status"] = self.status
        return context


class AudienceLabContractError(AudienceLabError):
    """Response without an audience id, or a 2xx carrying an error payload."""

    NO_AUDIENCE_ID = "AUDIENCELAB_NO_AUDIENCE_ID"
    ERROR_PAYLOAD = "AUDIENCELAB_ERROR_PAYLOAD"

    def __init__(
        self,
        code: str,
        endpoint: str,
        method: str,
        response_shape: str,
        request_id: Optional[str] = None,
        upstream_message: Optional[str] = None,
    ) -> None:
        if code == self.NO_AUDIENCE_ID:
            hint = (
                "Response did not contain an audience ID in expected locations. "
                "Contact AudienceLab support with the request id."
            )
        else:
            hint = f"AudienceLab returned an error: {upstream_message or 'unknown'}"
        super().__init__(f"AudienceLab contract error: {hint}", endpoint, method, request_id)
        self.code = code
        self.hint = hint
        self.response_shape = response_shape
        self.upstream_message = upstream_message

    def to_safe_context(self) -> Dict[str, Any]:
        context = super().to_safe_context()
        context["response_shape"] = self.response_shape
        if self.upstream_message:
            context["upstream_message"] = self.upstream_message
        context["hint"] = self.hint
        return context


class AudienceLabAsyncError(AudienceLabError):
    """Audience creation answered with a job handle instead of an id."""

    code = "AUDIENCELAB_ASYNC_RESPONSE"
    hint = "AudienceLab returned an async job response. Polling is handled by the caller."

    def __init__(
        self,
        endpoint: str,
        method: str,
        request_id: Optional[str] = None,
        job_id: Optional[str] = None,
        task_id: Optional[str] = None,
    ) -> None:
        super().__init__(f"AudienceLab async response: {self.hint}", endpoint, method, request_id)
        self.job_id = job_id
        self.task_id = task_id

    def to_safe_context(self) -> Dict[str, Any]:
        context = super().to_safe_context()
        if self.job_id:
            context["job_id"] = self.job_id
        if self.task_id:
            context["task_id"] = self.task_id
        context["hint"] = self.hint
        return context


class ProviderConfigError(ValueError):
    """Provider credentials missing or unusable."""

    code = "PROVIDER_CONFIG_ERROR"

    def __init__(self, provider: str, message: str, hint: str) -> None:
        super().__init__(message)
        self.provider = provider
        self.hint = hint

    def to_safe_context(self) -> Dict[str, Any]:
        return {"code": self.code, "provider": self.provider, "hint": self.hint}


# =============================================================================
# RESPONSE PARSING (PURE)
# =============================================================================

def generate_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def describe_shape(value: Any, depth: int = 0, max_depth: int = SHAPE_MAX_DEPTH) -> str:
    """
    Describe the structure of a response without any of its values.

    Examples:
        >>> describe_shape({"id": "a1", "data": {"x": 1}})
        'object{id,data:object{x}}'
        >>> describe_shape("secret")
        'string(6)'
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return f"string({len(value)})"
    if isinstance(value, (int, float)):
        return "number"

    if isinstance(value, list):
        if not value:
            return "array[]"
        if depth >= max_depth:
            return f"array[{len(value)}]"
        return f"array[{len(value)}]<{describe_shape(value[0], depth + 1, max_depth)}>"

    if isinstance(value, Mapping):
        keys = [str(k) for k in value.keys()]
        if not keys:
            return "object{}"
        if depth >= max_depth:
            return f"object{{{len(keys)} keys}}"
        parts = []
        for key in keys[:SHAPE_MAX_KEYS]:
            nested = value[key]
            if isinstance(nested, (Mapping, list)):
                parts.append(f"{key}:{describe_shape(nested, depth + 1, max_depth)}")
            else:
                parts.append(key)
        suffix = f",+{len(keys) - SHAPE_MAX_KEYS}" if len(keys) > SHAPE_MAX_KEYS else ""
        return f"object{{{','.join(parts)}}}{suffix}"

    return type(value).__name__


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _id_from_object(obj: Mapping[str, Any]) -> Optional[str]:
    for key in ID_KEYS:
        if key not in obj:
            continue
        value = obj[key]
        if isinstance(value, str) and value:
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
    return None


def _is_error_payload(obj: Mapping[str, Any]) -> bool:
    if "error" in obj:
        return True
    if isinstance(obj.get("errors"), list):
        return True
    if "message" in obj:
        if obj.get("success") is False:
            return True
        code = obj.get("code")
        if isinstance(code, str) and ERROR_CODE_PATTERN.search(code):
            return True
    return False


def _error_message(obj: Mapping[str, Any]) -> str:
    error = obj.get("error")
    if isinstance(error, str):
        return error
    if isinstance(error, Mapping) and "message" in error:
        return str(error["message"])
    if isinstance(obj.get("message"), str):
        return obj["message"]
    errors = obj.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, str):
            return first
        if isinstance(first, Mapping) and "message" in first:
            return str(first["message"])
    return "Unknown error"


def extract_audience_id(
    body: Any,
    headers: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Find the audience id in a creation response.

    Checks the Location header, then async job markers, error payloads,
    the root object and the 'data', 'audience' and 'result' containers.
    A list body is read from its first element.

    Returns:
        {"ok": True, "audience_id", "source"} on success, otherwise
        {"ok": False, "reason": "async" | "error_payload" | "not_found", ...}.
    """
    if headers:
        location = headers.get("location") or headers.get("Location")
        if location:
            match = LOCATION_ID_PATTERN.search(location)
            if match:
                return {"ok": True, "audience_id": match.group(1), "source": "location_header"}

    if isinstance(body, list):
        if not body:
            return {"ok": False, "reason": "not_found", "shape": "empty_array"}
        if isinstance(body[0], Mapping):
            audience_id = _id_from_object(body[0])
            if audience_id:
                return {"ok": True, "audience_id": audience_id, "source": "array[0]"}
        return {"ok": False, "reason": "not_found", "shape": describe_shape(body)}

    if not isinstance(body, Mapping):
        return {"ok": False, "reason": "not_found", "shape": describe_shape(body)}

    if any(key in body for key in ("job_id", "task_id", "request_id")):
        if not _id_from_object(body):
            return {
                "ok": False,
                "reason": "async",
                "job_id": _as_str(body.get("job_id")),
                "task_id": _as_str(body.get("task_id")) or _as_str(body.get("request_id")),
            }

    if _is_error_payload(body):
        return {"ok": False, "reason": "error_payload", "error_message": _error_message(body)}

    root_id = _id_from_object(body)
    if root_id:
        return {"ok": True, "audience_id": root_id, "source": "root"}

    data = body.get("data")
    if isinstance(data, list):
        if data and isinstance(data[0], Mapping):
            audience_id = _id_from_object(data[0])
            if audience_id:
                return {"ok": True, "audience_id": audience_id, "source": "data[0]"}
    elif isinstance(data, Mapping):
        audience_id = _id_from_object(data)
        if audience_id:
            return {"ok": True, "audience_id": audience_id, "source": "data"}

    for container in ("audience", "result"):
        nested = body.get(container)
        if isinstance(nested, Mapping):
            audience_id = _id_from_object(nested)
            if audience_id:
                return {"ok": True, "audience_id": audience_id, "source": container}

    return {"ok": False, "reason": "not_found", "shape": describe_shape(body)}


# =============================================================================
# PAYLOAD BUILDING (PURE)
# =============================================================================

def lookup_zip_location(zip_code: str) -> Optional[Dict[str, str]]:
    return ZIP_LOOKUP.get(zip_code)


def build_audience_payload(context: ScopeContext, tier: str) -> Dict[str, Any]:
    """
    Build the audience creation payload for a targeting request.

    Args:
        context: Validated targeting request.
        tier: Quality tier, mapped to the provider's intent-strength filter.

    Returns:
        JSON-serializable payload dict.
    """
    lead_request = context["lead_request"]

    locations: List[Dict[str, str]] = []
    for zip_code in context["zips"][:MAX_LOCATION_HINTS]:
        hint = lookup_zip_location(zip_code)
        if hint:
            locations.append({"city": hint["city"], "state": hint["state"], "zip": zip_code})
        else:
            locations.append({"zip": zip_code})

    pack = resolve_intent_pack(lead_request)

    filters: Dict[str, Any] = {
        "keywords": build_packed_keywords(lead_request, pack),
        "zip_codes": list(context["zips"]),
        "intent_strength": map_tier_to_intent_strength(tier),
    }
    if locations:
        filters["locations"] = locations

    return {
        "name": f"Lead Request: {lead_request[:AUDIENCE_NAME_MAX_CHARS]}",
        "description": lead_request,
        "filters": filters,
        "intent_pack": pack["id"],
        "size": PAGE_SIZE,
    }


def sanitize_api_key(raw: Optional[str]) -> str:
    """
    Strip a BOM and surrounding whitespace from the API key.

    Raises:
        ProviderConfigError: If the key is missing or not header-safe.
    """
    key = (raw or "").replace("\ufeff", "").strip()
    if not key:
        raise ProviderConfigError(
            provider=PROVIDER_NAME,
            message="AUDIENCELAB_API_KEY not set",
            hint="Set AUDIENCELAB_API_KEY or enable MOCK_PROVIDER.",
        )
    try:
        key.encode("latin-1")
    except UnicodeEncodeError as e:
        raise ProviderConfigError(
            provider=PROVIDER_NAME,
            message="AUDIENCELAB_API_KEY contains characters not allowed in HTTP headers",
            hint="Re-copy the key without smart quotes or other non-ASCII characters.",
        ) from e
    return key


# =============================================================================
# HTTP CLIENT
# =============================================================================

class AudienceLabClient:
    """
    Thin synchronous client for the AudienceLab REST API.

    One instance per request; holds no state besides its settings.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        request_id: Optional[str] = None,
    ) -> None:
        self.api_key = sanitize_api_key(api_key if api_key is not None else AUDIENCELAB_API_KEY)
        self.base_url = (base_url or AUDIENCELAB_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.request_id = request_id or generate_request_id()

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Api-Key": self.api_key,
        }

    def _raise_for_status(self, response: requests.Response, endpoint: str, method: str) -> None:
        status = response.status_code
        if status < 400:
            return

        request_id = response.headers.get(REQUEST_ID_HEADER) or self.request_id
        if status in (401, 403):
            raise AudienceLabAuthError(status, endpoint, method, request_id)
        if status >= 500:
            raise AudienceLabUpstreamError(status, endpoint, method, request_id)

        # Remaining 4xx: no body, it may echo request data
        raise requests.HTTPError(
            f"AudienceLab API returned {status} on {method} {endpoint}",
            response=response,
        )

    def create_audience(self, context: ScopeContext, tier: str) -> str:
        """
        Create an audience and return its id.

        Raises:
            AudienceLabAuthError, AudienceLabUpstreamError,
            AudienceLabAsyncError, AudienceLabContractError,
            requests.RequestException.
        """
        endpoint = AUDIENCES_ENDPOINT
        response = requests.post(
            f"{self.base_url}{endpoint}",
            json=build_audience_payload(context, tier),
            headers=self.headers,
            timeout=self.timeout,
        )
        self._raise_for_status(response, endpoint, "POST")

        body = response.json()
        result = extract_audience_id(body, response.headers)
        if result["ok"]:
            logger.info(f"Audience created (source={result['source']}, request_id={self.request_id})")
            return result["audience_id"]

        if result["reason"] == "async":
            raise AudienceLabAsyncError(
                endpoint, "POST", self.request_id,
                job_id=result.get("job_id"), task_id=result.get("task_id"),
            )
        if result["reason"] == "error_payload":
            raise AudienceLabContractError(
                AudienceLabContractError.ERROR_PAYLOAD, endpoint, "POST",
                response_shape=describe_shape(body),
                request_id=self.request_id,
                upstream_message=result["error_message"],
            )
        raise AudienceLabContractError(
            AudienceLabContractError.NO_AUDIENCE_ID, endpoint, "POST",
            response_shape=result["shape"],
            request_id=self.request_id,
        )

    def fetch_audience_members(
        self,
        audience_id: str,
        max_contacts: int = DEFAULT_MAX_CONTACTS,
    ) -> List[Dict[str, Any]]:
        """
        Page sequentially through an audience's members.

        Stops on an empty or short page, after MAX_PAGES pages, or once
        max_contacts members have been collected (the result is capped).
        """
        endpoint = f"{AUDIENCES_ENDPOINT}/{audience_id}"
        contacts: List[Dict[str, Any]] = []

        for page in range(1, MAX_PAGES + 1):
            response = requests.get(
                f"{self.base_url}{endpoint}",
                params={"page": page, "page_size": PAGE_SIZE},
                headers=self.headers,
                timeout=self.timeout,
            )
            self._raise_for_status(response, endpoint, "GET")

            body = response.json()
            members = []
            if isinstance(body, Mapping):
                members = body.get("data") or body.get("members") or []
            if not isinstance(members, list) or not members:
                break

            contacts.extend(m for m in members if isinstance(m, Mapping))
            logger.info(f"Fetched page {page}: {len(members)} members ({len(contacts)} total)")

            if len(contacts) >= max_contacts or len(members) < PAGE_SIZE:
                break

        return contacts[:max_contacts]


# =============================================================================
# MOCK DATA
# =============================================================================

def get_mock_contacts(context: ScopeContext, count: int = 12) -> List[Dict[str, Any]]:
    """
    Deterministic synthetic batch covering the main field families.

    Mixes residential skiptrace, commercial and generic-only records so
    every recipe branch sees traffic in MOCK_PROVIDER runs.
    """
    zips = context["zips"] or ["33101"]
    contacts: List[Dict[str, Any]] = []

    for i in range(count):
        zip_code = zips[i % len(zips)]
        hint = lookup_zip_location(zip_code) or {"city": "Springfield", "state": "FL"}
        local = f"{5550000 + i:07d}"
        kind = i % 3

        if kind == 0:
            contacts.append({
                "SKIPTRACE_NAME": f"Mock Resident{i} Person",
                "SKIPTRACE_ADDRESS": f"{100 + i} Mock Ave",
                "SKIPTRACE_CITY": hint["city"],
                "SKIPTRACE_STATE": hint["state"],
                "SKIPTRACE_ZIP": zip_code,
                "SKIPTRACE_WIRELESS_NUMBERS": f"305{local}",
                "SKIPTRACE_MATCH_BY": "ADDRESS,EMAIL",
                "PERSONAL_EMAIL": f"resident{i}@example.com",
                "PERSONAL_EMAIL_VALIDATION_STATUS": "Valid (Esp)",
                "DNC": "N",
            })
        elif kind == 1:
            contacts.append({
                "FIRST_NAME": f"Mock{i}",
                "LAST_NAME": "Owner",
                "COMPANY_ADDRESS": f"{200 + i} Commerce Blvd",
                "COMPANY_CITY": hint["city"],
                "COMPANY_STATE": hint["state"],
                "COMPANY_ZIP": zip_code,
                "SKIPTRACE_B2B_WIRELESS": f"786{local}",
                "SKIPTRACE_B2B_MATCH_BY": "NAME,COMPANY_ADDRESS",
                "BUSINESS_EMAIL": f"owner{i}@example.com",
                "BUSINESS_EMAIL_VALIDATION_STATUS": "Valid",
            })
        else:
            contacts.append({
                "data": {
                    "first_name": f"Mock{i}",
                    "last_name": "Prospect",
                    "address": f"{300 + i} Generic St",
                    "city": hint["city"],
                    "state": hint["state"],
                    "zip": zip_code,
                    "phone": f"954{local}",
                    "email": f"prospect{i}@example.com",
                },
            })

    return contacts


def fetch_contacts(
    context: ScopeContext,
    tier: str,
    max_contacts: int = DEFAULT_MAX_CONTACTS,
    mock: Optional[bool] = None,
) -> Dict[str, Any]:
    """
    Create an audience for the request and return its members.

    Args:
        context: Validated targeting request.
        tier: Quality tier for the intent-strength filter.
        max_contacts: Cap on returned members.
        mock: Force mock mode on/off. Defaults to MOCK_PROVIDER.

    Returns:
        Dict with 'contacts', 'audience_id', 'request_id', 'mock_mode'.
    """
    use_mock = MOCK_PROVIDER if mock is None else mock
    if use_mock:
        logger.info("MOCK_PROVIDER enabled - returning mock contacts")
        return {
            "contacts": get_mock_contacts(context)[:max_contacts],
            "audience_id": "mock_audience",
            "request_id": generate_request_id(),
            "mock_mode": True,
        }

    client = AudienceLabClient()
    started = time.monotonic()
    audience_id = client.create_audience(context, tier)
    contacts = client.fetch_audience_members(audience_id, max_contacts=max_contacts)
    logger.info(
        f"Provider fetch complete: {len(contacts)} contacts in "
        f"{time.monotonic() - started:.1f}s (request_id={client.request_id})"
    )

    return {
        "contacts": contacts,
        "audience_id": audience_id,
        "request_id": client.request_id,
        "mock_mode": False,
    }
