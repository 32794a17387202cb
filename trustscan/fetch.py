"""Collection of Trusted Advisor findings through AWS service clients."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Optional

from trustscan.links import build_deep_link, resolve_az, resolve_region, resolve_resource_id
from trustscan.model import Finding, Segment, Severity
from trustscan.report import extract_service, find_pretty_name

logger = logging.getLogger(__name__)

_SUBSCRIPTION_ERROR_CODE = "SubscriptionRequiredException"
_MAX_CONCURRENT_CHECKS = 10
_QUIET_STATUSES = ("ok", "not_available")


class SubscriptionRequiredError(Exception):
    """The account lacks the support plan needed for the Trusted Advisor API."""


@dataclass
class ScanResult:
    """Trusted Advisor findings with the account they were collected in."""

    account_id: str = ""
    account_alias: str = ""
    findings: list[Finding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of this result."""
        return {
            "accountId": self.account_id,
            "accountAlias": self.account_alias,
            "findings": [finding.to_dict() for finding in self.findings],
        }


def _error_code(error: BaseException) -> Optional[str]:
    code = getattr(error, "code", None)
    if isinstance(code, str):
        return code
    response = getattr(error, "response", None)
    if isinstance(response, Mapping):
        details = response.get("Error")
        if isinstance(details, Mapping):
            found = details.get("Code")
            if isinstance(found, str):
                return found
    return None


def is_subscription_error(error: Optional[BaseException]) -> bool:
    """Tell whether an error, or one it wraps, reports a missing support plan."""
    seen: set[int] = set()
    while error is not None and id(error) not in seen:
        seen.add(id(error))
        if isinstance(error, SubscriptionRequiredError):
            return True
        if _error_code(error) == _SUBSCRIPTION_ERROR_CODE:
            return True
        error = error.__cause__ or error.__context__
    return False


def map_category_to_segment(category: str) -> Segment:
    """Map a Trusted Advisor category to a finding segment."""
    lowered = category.lower()
    if lowered == "cost_optimizing":
        return Segment.FINOPS
    if lowered == "security":
        return Segment.SECURITY
    return Segment.OBSERVABILITY


def resolve_account_id(sts_client: Any) -> str:
    """Return the account ID of the current credentials, or "" on failure."""
    try:
        identity = sts_client.get_caller_identity()
    except Exception as exc:  # any client failure only loses context
        logger.warning("could not resolve account ID via STS: %s", exc)
        return ""
    return identity.get("Account") or ""


def resolve_account_alias(iam_client: Any) -> str:
    """Return the first account alias, or "" when none is set or the call fails."""
    try:
        response = iam_client.list_account_aliases()
    except Exception as exc:
        logger.warning(
            "could not resolve account alias via IAM "
            "(iam:ListAccountAliases may not be granted): %s",
            exc,
        )
        return ""
    aliases = response.get("AccountAliases") or []
    return aliases[0] if aliases else ""


def _finding_for_check(support_client: Any, check: Mapping[str, Any]) -> Optional[Finding]:
    try:
        response = support_client.describe_trusted_advisor_check_result(checkId=check.get("id"))
    except Exception:
        return None
    result = response.get("result")
    if not result:
        return None
    status = result.get("status")
    if status is None or status in _QUIET_STATUSES:
        return None

    severity = Severity.CRITICAL if status == "error" else Severity.MEDIUM
    title = check.get("name") or ""
    category = check.get("category") or ""
    headers = check.get("metadata") or []
    is_az_balance = "availability zone balance" in title.lower()

    items: list[str] = []
    links: list[str] = []
    for resource in result.get("flaggedResources") or []:
        values = resource.get("metadata") or []
        raw_id = resolve_resource_id(headers, values, resource.get("resourceId") or "")
        raw_meta: dict[str, Any] = {
            header or "": value or "" for header, value in zip(headers, values)
        }
        raw_meta["_category"] = category

        if category == "service_limits":
            raw_id = resolve_region(raw_meta)
        if is_az_balance:
            az = resolve_az(raw_meta)
            if az:
                raw_id = az

        pretty_id = find_pretty_name(headers, values, raw_id)
        items.append(pretty_id)
        links.append(build_deep_link(title, raw_id, pretty_id, raw_meta))

    return Finding(
        segment=map_category_to_segment(category),
        title=title,
        category=category,
        items=items,
        severity=severity,
        provider="aws",
        summary=check.get("description") or "",
        metadata={"links": links, "service": extract_service(title)},
    )


def fetch_trusted_advisor_findings(support_client: Any, sts_client: Any, iam_client: Any) -> ScanResult:
    """Query Trusted Advisor for flagged checks and return them with account context.

    Raises SubscriptionRequiredError when the account has no support plan that
    grants access to the API; any other failure to list checks propagates.
    """
    account_id = resolve_account_id(sts_client)
    account_alias = resolve_account_alias(iam_client)

    try:
        response = support_client.describe_trusted_advisor_checks(language="en")
    except Exception as exc:
        if is_subscription_error(exc):
            raise SubscriptionRequiredError(str(exc)) from exc
        raise

    checks = response.get("checks") or []
    with ThreadPoolExecutor(max_workers=_MAX_CONCURRENT_CHECKS) as pool:
        results = list(pool.map(lambda check: _finding_for_check(support_client, check), checks))

    return ScanResult(
        account_id=account_id,
        account_alias=account_alias,
        findings=[finding for finding in results if finding is not None],
    )