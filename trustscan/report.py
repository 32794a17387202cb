"""HTML report of scan findings and name extraction helpers."""

from __future__ import annotations

import argparse
import json
import os
import re
import sys
from collections.abc import Iterable, Sequence
from typing import Optional

from trustscan.model import Finding, Severity

_REGION_PATTERN = re.compile(r"[a-z]{2}(-[a-z]+-\d+)", re.ASCII)

_SKIPPED_HEADER_WORDS = (
    "region", "location", "zone", "status", "limit", "amount", "usage", "service",
)
_NAME_HEADER_WORDS = ("name", "user", "domain", "function", "bucket", "principal")

_SERVICE_KEYWORDS = (
    ("s3", "S3"),
    ("lambda", "Lambda"),
    ("iam", "IAM"),
    ("sts", "STS"),
    ("cloudfront", "CloudFront"),
    ("cloudtrail", "CloudTrail"),
    ("cloudwatch", "CloudWatch"),
    ("ec2", "EC2"),
    ("ebs", "EBS"),
    ("rds", "RDS"),
    ("elb", "ELB"),
    ("route 53", "Route 53"),
    ("sns", "SNS"),
    ("sqs", "SQS"),
    ("dynamodb", "DynamoDB"),
    ("redshift", "Redshift"),
    ("elasticache", "ElastiCache"),
    ("auto scaling", "Auto Scaling"),
    ("vpc", "VPC"),
    ("eks", "EKS"),
    ("ecs", "ECS"),
    ("kms", "KMS"),
    ("guardduty", "GuardDuty"),
    ("waf", "WAF"),
)

_STYLE = (
    "table { border-collapse: collapse; width: 100%; font-family: sans-serif; font-size: 11px; }"
    "th, td { border: 1px solid #ddd; padding: 4px; text-align: left; }"
    "th { background-color: #f2f2f2; }"
    ".svc-row { background-color: #e9ecef; font-weight: bold; }"
    ".crit { color: red; font-weight: bold; }"
    "a { color: #0066cc; text-decoration: none; }"
)

_HEADER_ROW = (
    "<table><tr><th>Segment</th><th>Category</th><th>AWS Service</th><th>Finding</th>"
    "<th>Description</th><th>Severity</th><th>Resource Name</th></tr>"
)


def find_pretty_name(
    headers: Sequence[Optional[str]],
    metadata: Sequence[Optional[str]],
    fallback: str,
) -> str:
    """Return a human-readable resource name from the metadata, else fallback."""
    for header, value in zip(headers, metadata):
        h = (header or "").lower()
        if any(word in h for word in _SKIPPED_HEADER_WORDS):
            continue
        if h == "resource" or any(word in h for word in _NAME_HEADER_WORDS):
            val = (value or "").strip()
            if val not in ("", "-", "N/A") and not _REGION_PATTERN.fullmatch(val):
                return val
    return fallback


def extract_service(title: str) -> str:
    """Return the service named in a check title, or "AWS"."""
    lower = title.lower()
    for keyword, service in _SERVICE_KEYWORDS:
        if keyword in lower:
            return service
    return "AWS"


def _rows(finding: Finding) -> Iterable[str]:
    sev_class = " class='crit'" if finding.severity == Severity.CRITICAL else ""
    service = finding.metadata.get("service")
    if not isinstance(service, str) or not service:
        service = extract_service(finding.title)
    links = finding.metadata.get("links")
    if not isinstance(links, (list, tuple)):
        links = []

    for i, item in enumerate(finding.items):
        link = links[i] if i < len(links) and isinstance(links[i], str) else "#"
        yield (
            "<tr>"
            f"<td>{finding.segment.value}</td>"
            f"<td>{finding.category}</td>"
            f"<td>{service}</td>"
            f"<td>{finding.title}</td>"
            f"<td>{finding.summary}</td>"
            f"<td{sev_class}>{finding.severity.value}</td>"
            f"<td><a href='{link}' target='_blank'>{item}</a></td>"
            "</tr>"
        )


def generate_html_table(findings: Iterable[Finding]) -> str:
    """Render findings as an HTML page with one table row per flagged item."""
    parts = [f"<html><head><style>{_STYLE}</style></head><body>", _HEADER_ROW]
    for finding in findings:
        parts.extend(_rows(finding))
    parts.append("</table></body></html>")
    return "".join(parts)


def generate_html() -> None:
    """Print the HTML report for the findings file named by TS_SCAN_JSON."""
    json_file = os.environ.get("TS_SCAN_JSON", "")
    if not json_file:
        raise RuntimeError("TS_SCAN_JSON environment variable is not set")
    try:
        with open(json_file, encoding="utf-8") as handle:
            text = handle.read()
    except OSError as exc:
        raise FileNotFoundError(
            f"file {json_file} not found. Run fetch mode first"
        ) from exc
    findings = [Finding.from_dict(entry) for entry in json.loads(text) or []]
    sys.stdout.write(generate_html_table(findings))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry point: print the HTML report."""
    parser = argparse.ArgumentParser(
        description="Print an HTML report of the findings file named by TS_SCAN_JSON."
    )
    parser.parse_args(argv)
    try:
        generate_html()
    except (RuntimeError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0