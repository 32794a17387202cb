"""Resolution of resource identifiers and console deep links."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Optional

DEFAULT_REGION = "us-east-1"
TRUSTED_ADVISOR_URL = (
    "https://console.aws.amazon.com/trustedadvisor/home?region=us-east-1#/dashboard"
)

# Lowercase metadata headers that hold a real resource identifier.
_KNOWN_ID_HEADERS = frozenset(
    {
        "volume id",
        "instance id",
        "snapshot id",
        "nat gateway id",
        "ip address",
        "principal arn",
        "principal",
        "hosted zone name",
        "distribution id",
        "load balancer arn",
        "load balancer name",
        "target group arn",
        "db instance id",
        "function name",
        "cluster id",
        "key id",
        "security group id",
        "resource",
    }
)

_PLACEHOLDERS = ("", "-", "N/A")

_AZ_PATTERN = re.compile(r"[a-z]{2}-[a-z]+-\d+[a-z]", re.ASCII)


def resolve_resource_id(
    headers: Sequence[Optional[str]],
    metadata: Sequence[Optional[str]],
    fallback: str,
) -> str:
    """Return the real resource ID from well-known metadata columns, else fallback."""
    for header, value in zip(headers, metadata):
        if (header or "").lower() in _KNOWN_ID_HEADERS:
            val = (value or "").strip()
            if val not in _PLACEHOLDERS:
                return val
    return fallback


def _ec2_url(region: str, fragment: str) -> str:
    return f"https://{region}.console.aws.amazon.com/ec2/v2/home?region={region}#{fragment}"


def _label(pretty_id: str, resource_id: str) -> str:
    return pretty_id if pretty_id and pretty_id != resource_id else resource_id


def build_deep_link(
    check_name: str, resource_id: str, pretty_id: str, metadata: Mapping[str, Any]
) -> str:
    """Return a console link for a flagged resource, or the dashboard link."""
    region = resolve_region(metadata)
    rid = resource_id

    if metadata.get("_category") == "service_limits":
        return f"https://{region}.console.aws.amazon.com/servicequotas/home"

    arn_link = build_arn_link(rid, region)
    if arn_link:
        return arn_link

    name = check_name.lower()
    if "s3" in name:
        return build_s3_link(pretty_id, rid, region)
    if "elastic ip" in name:
        return build_eip_link(rid, region)
    if "availability zone balance" in name:
        az = rid if rid and "-" in rid else region
        return _ec2_url(region, f"Instances:availabilityZone={az}")
    if "ec2" in name or "ebs" in name:
        return build_ec2_link(rid, region)
    if "rds" in name:
        return f"https://{region}.console.aws.amazon.com/rds/home?region={region}#database:id={rid}"
    if "access analyzer" in name:
        analyzer_region = rid if rid and "-" in rid else region
        return (
            f"https://{analyzer_region}.console.aws.amazon.com/access-analyzer/home"
            f"?region={analyzer_region}#/analyzer"
        )
    if "iam" in name or "sts" in name:
        return build_iam_link(pretty_id, rid, metadata)
    if "lambda" in name:
        return build_lambda_link(pretty_id, rid, region)
    if "route 53" in name or "route53" in name:
        return build_route53_link(pretty_id)
    if "security group" in name or rid.startswith("sg-"):
        return _ec2_url(region, f"SecurityGroups:search={_label(pretty_id, rid)}")
    if "vpc endpoint" in name or rid.startswith("vpce-"):
        return (
            f"https://{region}.console.aws.amazon.com/vpc/home?region={region}"
            f"#Endpoints:vpcEndpointId={rid}"
        )
    if "nat" in name:
        return build_nat_gateway_link(rid, region)
    if "target group" in name:
        return _ec2_url(region, f"TargetGroups:search={_label(pretty_id, rid)}")
    if "load balancer" in name or "elb" in name:
        return _ec2_url(region, f"LoadBalancers:search={_label(pretty_id, rid)}")
    return TRUSTED_ADVISOR_URL


def build_route53_link(domain: str) -> str:
    """Return the hosted zones page, filtered by domain when one is given."""
    domain = domain.strip().removesuffix(".")
    if not domain:
        return "https://console.aws.amazon.com/route53/v2/hostedzones"
    return f"https://console.aws.amazon.com/route53/v2/hostedzones#?searchFilter={domain}"


def build_nat_gateway_link(resource_id: str, region: str) -> str:
    """Return the NAT gateway page filtered to one gateway."""
    if not resource_id:
        return TRUSTED_ADVISOR_URL
    return (
        f"https://{region}.console.aws.amazon.com/vpc/home?region={region}"
        f"#NatGateways:natGatewayId={resource_id}"
    )


def build_eip_link(ip: str, region: str) -> str:
    """Return the Elastic IP page, filtered to the address when it is IPv4."""
    if ip and is_ipv4(ip):
        return _ec2_url(region, f"Addresses:PublicIp={ip}")
    return _ec2_url(region, "Addresses:")


def is_ipv4(text: str) -> bool:
    """Tell whether text looks like a dotted-decimal IPv4 address."""
    parts = text.split(".")
    if len(parts) != 4:
        return False
    return all(
        0 < len(part) <= 3 and all(c in "0123456789" for c in part) for part in parts
    )


def resolve_az(metadata: Mapping[str, Any]) -> str:
    """Return an availability zone found in the metadata, or an empty string."""
    for key in ("Availability Zone", "availability zone", "AZ", "Zone"):
        val = metadata.get(key)
        if isinstance(val, str) and _AZ_PATTERN.fullmatch(val.strip()):
            return val.strip()
    for val in metadata.values():
        if isinstance(val, str) and _AZ_PATTERN.fullmatch(val.strip()):
            return val.strip()
    return ""


def resolve_region(metadata: Mapping[str, Any]) -> str:
    """Return the region named in the metadata, defaulting to us-east-1."""
    for key in ("Region", "Resource Region", "Location", "Region Name"):
        val = metadata.get(key)
        if isinstance(val, str) and val:
            return val
    return DEFAULT_REGION


def build_arn_link(resource_id: str, region: str) -> str:
    """Return a console link derived from an ARN, or an empty string."""
    if not resource_id.startswith("arn:aws:"):
        return ""
    parts = resource_id.split(":")
    if len(parts) <= 5:
        return ""
    service, resource = parts[2], parts[5]
    if service == "s3":
        bucket = resource.split("/")[0]
        return f"https://s3.console.aws.amazon.com/s3/buckets/{bucket}"
    if service == "iam":
        return "https://console.aws.amazon.com/iam/home#/roles"
    if service == "kms":
        key_id = resource.removeprefix("key/")
        return f"https://{region}.console.aws.amazon.com/kms/home?region={region}#/kms/keys/{key_id}"
    if service == "lambda" and len(parts) > 6:
        return (
            f"https://{region}.console.aws.amazon.com/lambda/home?region={region}"
            f"#/functions/{parts[6]}"
        )
    if service == "elasticloadbalancing":
        return build_elb_arn_link(resource, region)
    return ""


def build_elb_arn_link(resource: str, region: str) -> str:
    """Return a link from the resource part of a load-balancing ARN."""
    segments = resource.split("/")
    if resource.startswith("loadbalancer/") and len(segments) >= 3:
        return _ec2_url(region, f"LoadBalancers:search={segments[2]}")
    if resource.startswith("targetgroup/") and len(segments) >= 2:
        return _ec2_url(region, f"TargetGroups:search={segments[1]}")
    return _ec2_url(region, "LoadBalancers:")


def build_s3_link(pretty_id: str, resource_id: str, region: str) -> str:
    """Return the console link of an S3 bucket."""
    bucket = pretty_id or resource_id
    return f"https://s3.console.aws.amazon.com/s3/buckets/{bucket}?region={region}"


def build_ec2_link(resource_id: str, region: str) -> str:
    """Return the console link of an EC2 instance or EBS volume."""
    if resource_id.startswith("i-"):
        return _ec2_url(region, f"InstanceDetails:instanceId={resource_id}")
    if resource_id.startswith("vol-"):
        return _ec2_url(region, f"VolumeDetails:volumeId={resource_id}")
    return TRUSTED_ADVISOR_URL


def build_iam_link(pretty_id: str, resource_id: str, metadata: Mapping[str, Any]) -> str:
    """Return the link of an IAM user, or of the users list."""
    user = resolve_user(pretty_id, resource_id, metadata)
    if user and user != resource_id and user != "N/A":
        return f"https://console.aws.amazon.com/iam/home?#/users/{user}"
    return "https://console.aws.amazon.com/iam/home?#/users"


def resolve_user(pretty_id: str, resource_id: str, metadata: Mapping[str, Any]) -> str:
    """Return an IAM user name from the pretty ID or the metadata."""
    if pretty_id and pretty_id != resource_id and pretty_id != "N/A":
        return pretty_id
    for key in ("User Name", "IAM User"):
        user = metadata.get(key)
        if isinstance(user, str) and user:
            return user
    return pretty_id


def build_lambda_link(pretty_id: str, resource_id: str, region: str) -> str:
    """Return the console link of a Lambda function."""
    function = pretty_id if pretty_id and pretty_id != "N/A" else resource_id
    if function.startswith("arn:aws:lambda:"):
        parts = function.split(":")
        if len(parts) > 6:
            function = parts[6]
    return f"https://{region}.console.aws.amazon.com/lambda/home?region={region}#/functions/{function}"