import pytest

from trustscan.fetch import (
    ScanResult,
    SubscriptionRequiredError,
    fetch_trusted_advisor_findings,
    is_subscription_error,
    map_category_to_segment,
    resolve_account_alias,
    resolve_account_id,
)
from trustscan.model import Finding, Segment, Severity


class ApiError(Exception):
    def __init__(self, code):
        super().__init__(f"{code}: failure")
        self.response = {"Error": {"Code": code, "Message": "failure"}}


class FakeSts:
    def __init__(self, account="111122223333", fail=False):
        self.account = account
        self.fail = fail

    def get_caller_identity(self):
        if self.fail:
            raise ApiError("AccessDenied")
        return {"Account": self.account}


class FakeIam:
    def __init__(self, aliases=("example-alias",), fail=False):
        self.aliases = list(aliases)
        self.fail = fail

    def list_account_aliases(self):
        if self.fail:
            raise ApiError("AccessDenied")
        return {"AccountAliases": self.aliases}


class FakeSupport:
    def __init__(self, checks, results, list_error=None):
        self.checks = checks
        self.results = results
        self.list_error = list_error

    def describe_trusted_advisor_checks(self, language):
        if self.list_error is not None:
            raise self.list_error
        assert language == "en"
        return {"checks": self.checks}

    def describe_trusted_advisor_check_result(self, checkId):
        outcome = self.results[checkId]
        if isinstance(outcome, Exception):
            raise outcome
        return {"result": outcome}


EBS_CHECK = {
    "id": "ebs1",
    "name": "Amazon EBS Underutilized Volumes",
    "description": "Checks volumes",
    "category": "cost_optimizing",
    "metadata": ["Region", "Volume ID", "Volume Name"],
}
EBS_RESULT = {
    "status": "warning",
    "flaggedResources": [
        {"resourceId": "hash1", "metadata": ["us-east-1", "vol-0abc123def456", "my-volume"]}
    ],
}
LIMIT_CHECK = {
    "id": "lim1",
    "name": "EC2 On-Demand Instances",
    "description": "Checks limits",
    "category": "service_limits",
    "metadata": ["Region", "Service", "Limit Name"],
}
LIMIT_RESULT = {
    "status": "warning",
    "flaggedResources": [
        {"resourceId": "hash2", "metadata": ["eu-west-1", "EC2", "On-Demand instances"]}
    ],
}
AZ_CHECK = {
    "id": "az1",
    "name": "Amazon EC2 Availability Zone Balance",
    "description": "Checks balance",
    "category": "fault_tolerance",
    "metadata": ["Region", "Availability Zone", "Status"],
}
AZ_RESULT = {
    "status": "warning",
    "flaggedResources": [
        {"resourceId": "hash3", "metadata": ["us-east-1", "us-east-1a", "Yellow"]}
    ],
}
SEC_CHECK = {
    "id": "sec1",
    "name": "Security Groups - Unrestricted Access",
    "description": "Open ports",
    "category": "security",
    "metadata": ["Region", "Security Group Name", "Security Group ID"],
}
SEC_RESULT = {
    "status": "error",
    "flaggedResources": [
        {"resourceId": "hash4", "metadata": ["us-east-1", "web-sg", "sg-0abc123def456"]}
    ],
}
OK_CHECK = {"id": "ok1", "name": "Fine", "description": "", "category": "security", "metadata": []}
NA_CHECK = {"id": "na1", "name": "Unavailable", "description": "", "category": "security", "metadata": []}
BROKEN_CHECK = {"id": "bad1", "name": "Broken", "description": "", "category": "security", "metadata": []}


def _scan(checks, results, **kwargs):
    support = FakeSupport(checks, results)
    return fetch_trusted_advisor_findings(support, FakeSts(**kwargs), FakeIam())


@pytest.mark.parametrize(
    "category, expected",
    [
        ("cost_optimizing", Segment.FINOPS),
        ("security", Segment.SECURITY),
        ("performance", Segment.OBSERVABILITY),
        ("fault_tolerance", Segment.OBSERVABILITY),
        ("other", Segment.OBSERVABILITY),
    ],
)
def test_map_category_to_segment(category, expected):
    assert map_category_to_segment(category) == expected


def test_map_category_to_segment_ignores_case():
    assert map_category_to_segment("SECURITY") == Segment.SECURITY


def test_is_subscription_error_detects_code():
    assert is_subscription_error(ApiError("SubscriptionRequiredException")) is True


def test_is_subscription_error_rejects_other_codes():
    assert is_subscription_error(ApiError("AccessDenied")) is False
    assert is_subscription_error(ValueError("boom")) is False
    assert is_subscription_error(None) is False


def test_is_subscription_error_unwraps_cause():
    try:
        try:
            raise ApiError("SubscriptionRequiredException")
        except ApiError as inner:
            raise RuntimeError("wrapped") from inner
    except RuntimeError as outer:
        assert is_subscription_error(outer) is True


def test_resolve_account_id():
    assert resolve_account_id(FakeSts()) == "111122223333"
    assert resolve_account_id(FakeSts(fail=True)) == ""


def test_resolve_account_alias():
    assert resolve_account_alias(FakeIam()) == "example-alias"
    assert resolve_account_alias(FakeIam(aliases=())) == ""
    assert resolve_account_alias(FakeIam(fail=True)) == ""


def test_subscription_error_is_raised():
    support = FakeSupport([], {}, list_error=ApiError("SubscriptionRequiredException"))
    with pytest.raises(SubscriptionRequiredError):
        fetch_trusted_advisor_findings(support, FakeSts(), FakeIam())


def test_other_listing_errors_propagate():
    support = FakeSupport([], {}, list_error=ApiError("Throttling"))
    with pytest.raises(ApiError):
        fetch_trusted_advisor_findings(support, FakeSts(), FakeIam())


def test_quiet_and_failing_checks_are_skipped():
    result = _scan(
        [OK_CHECK, NA_CHECK, BROKEN_CHECK, EBS_CHECK],
        {
            "ok1": {"status": "ok", "flaggedResources": []},
            "na1": {"status": "not_available", "flaggedResources": []},
            "bad1": ApiError("InternalFailure"),
            "ebs1": EBS_RESULT,
        },
    )
    assert [f.title for f in result.findings] == ["Amazon EBS Underutilized Volumes"]


def test_account_context_is_attached():
    result = _scan([], {})
    assert result.account_id == "111122223333"
    assert result.account_alias == "example-alias"
    assert result.findings == []


def test_account_id_empty_when_sts_fails():
    result = _scan([EBS_CHECK], {"ebs1": EBS_RESULT}, fail=True)
    assert result.account_id == ""
    assert len(result.findings) == 1


def test_ebs_finding_contents():
    finding = _scan([EBS_CHECK], {"ebs1": EBS_RESULT}).findings[0]
    assert finding.segment == Segment.FINOPS
    assert finding.severity == Severity.MEDIUM
    assert finding.provider == "aws"
    assert finding.summary == "Checks volumes"
    assert finding.category == "cost_optimizing"
    assert finding.items == ["my-volume"]
    assert finding.metadata["service"] == "EBS"
    assert finding.metadata["links"] == [
        "https://us-east-1.console.aws.amazon.com/ec2/v2/home?region=us-east-1"
        "#VolumeDetails:volumeId=vol-0abc123def456"
    ]


def test_service_limit_finding_uses_region():
    finding = _scan([LIMIT_CHECK], {"lim1": LIMIT_RESULT}).findings[0]
    assert finding.items == ["eu-west-1"]
    assert finding.segment == Segment.OBSERVABILITY
    assert finding.metadata["links"] == [
        "https://eu-west-1.console.aws.amazon.com/servicequotas/home"
    ]


def test_az_balance_finding_uses_zone():
    finding = _scan([AZ_CHECK], {"az1": AZ_RESULT}).findings[0]
    assert finding.items == ["us-east-1a"]
    assert finding.metadata["links"] == [
        "https://us-east-1.console.aws.amazon.com/ec2/v2/home?region=us-east-1"
        "#Instances:availabilityZone=us-east-1a"
    ]


def test_error_status_is_critical():
    finding = _scan([SEC_CHECK], {"sec1": SEC_RESULT}).findings[0]
    assert finding.severity == Severity.CRITICAL
    assert finding.segment == Segment.SECURITY
    assert finding.items == ["web-sg"]
    assert finding.metadata["links"] == [
        "https://us-east-1.console.aws.amazon.com/ec2/v2/home?region=us-east-1"
        "#SecurityGroups:search=web-sg"
    ]


def test_findings_keep_check_order():
    result = _scan(
        [SEC_CHECK, EBS_CHECK, AZ_CHECK],
        {"sec1": SEC_RESULT, "ebs1": EBS_RESULT, "az1": AZ_RESULT},
    )
    assert [f.title for f in result.findings] == [
        "Security Groups - Unrestricted Access",
        "Amazon EBS Underutilized Volumes",
        "Amazon EC2 Availability Zone Balance",
    ]


def test_scan_result_to_dict():
    finding = Finding(segment=Segment.SECURITY, title="T", category="security", items=["a"])
    data = ScanResult(account_id="111122223333", account_alias="alias", findings=[finding]).to_dict()
    assert data["accountId"] == "111122223333"
    assert data["accountAlias"] == "alias"
    assert data["findings"] == [finding.to_dict()]