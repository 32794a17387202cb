# trustscan

trustscan turns AWS Trusted Advisor check results into findings a person can
act on. It gives every flagged resource a readable name and a direct link to
the matching page in the AWS console. It can also render a set of findings as
a single HTML table.

## Installation

```
pip install trustscan
```

trustscan needs no third-party packages at run time. To run the test suite,
install the `test` extra:

```
pip install "trustscan[test]"
```

## Collecting findings

Call `trustscan.fetch.fetch_trusted_advisor_findings(support_client, sts_client, iam_client)`
to run a scan. It returns a `ScanResult`, which has three fields:

- `account_id`
- `account_alias`
- `findings`, a list of `trustscan.model.Finding`

You supply the three client objects. Each must offer the method named below and
return dictionaries shaped like AWS API responses:

| Client           | Method called                                       | Keys read                                                                   |
|------------------|-----------------------------------------------------|-----------------------------------------------------------------------------|
| `support_client` | `describe_trusted_advisor_checks(language="en")`    | `checks`, each with `id`, `name`, `category`, `description`, `metadata`      |
| `support_client` | `describe_trusted_advisor_check_result(checkId=...)` | `result` with `status` and `flaggedResources` (`resourceId`, `metadata`)     |
| `sts_client`     | `get_caller_identity()`                             | `Account`                                                                   |
| `iam_client`     | `list_account_aliases()`                            | `AccountAliases`; the first one is used                                     |

How failures and statuses are handled:

- If the account ID or alias cannot be read, a warning is logged and the field
  is left as an empty string.
- If listing the checks fails because the account has no Business or
  Enterprise support plan, `SubscriptionRequiredError` is raised. Any other
  failure to list the checks is passed on unchanged.
- `is_subscription_error(error)` tells whether an error, or any error it was
  raised from, has the code `SubscriptionRequiredException`. The code is read
  from a `code` attribute or from `response["Error"]["Code"]`.
- Check results are fetched with up to 10 running at a time. A check whose
  result cannot be fetched is skipped.
- A check whose status is `ok` or `not_available` produces no finding.
- A check in `error` status is rated `critical`. Any other flagged check is
  rated `medium`.

`map_category_to_segment` maps each Trusted Advisor category to a segment:

| Category          | Segment       |
|-------------------|---------------|
| `cost_optimizing` | finops        |
| `security`        | security      |
| anything else     | observability |

Each finding has its provider set to `aws`. Its `items` list holds the names of
the flagged resources. Its `metadata` holds a `links` list, with one console
link per item, and the `service` named in the check title.

## Findings as JSON

`Finding.to_dict()` and `ScanResult.to_dict()` return plain, JSON-ready
dictionaries. They use the keys `segment`, `category`, `title`, `severity`,
`items`, `resourceIds`, `provider`, `summary` and `metadata`. The scan result
itself uses `accountId`, `accountAlias` and `findings`.

`Finding.from_dict()` builds a finding back from such a dictionary. It raises
`ValueError` if the segment or severity is unknown. A missing severity is read
as `medium`.

## Rendering the report

Write the findings as a JSON array of finding dictionaries, for example
`result.to_dict()["findings"]`. Point `TS_SCAN_JSON` at that file, then run:

```
TS_SCAN_JSON=scan.json trustscan-report > report.html
```

The HTML goes to standard output, with one table row per flagged item. In any
of the following cases the command prints an error to standard error and exits
with status 1:

- the variable is not set;
- the file cannot be read;
- the file is not valid JSON;
- a finding has an unknown segment or severity.

From Python:

- `trustscan.report.generate_html_table(findings)` returns the same HTML as a
  string.
- `trustscan.report.generate_html()` prints the report for the file named by
  `TS_SCAN_JSON`.

## Helpers

`trustscan.links` works out resource identifiers and console links:

- `build_deep_link(check_name, resource_id, pretty_id, metadata)` picks a link
  from the resource ARN or the check name. If nothing matches, it falls back to
  the Trusted Advisor dashboard.
- There are service-specific builders: `build_s3_link`, `build_ec2_link`,
  `build_iam_link`, `build_lambda_link`, `build_route53_link`,
  `build_nat_gateway_link`, `build_eip_link`, `build_arn_link` and
  `build_elb_arn_link`.
- `resolve_resource_id`, `resolve_region` (default `us-east-1`), `resolve_az`,
  `resolve_user` and `is_ipv4` pick values out of check metadata.

`trustscan.report` adds two more helpers:

- `find_pretty_name` picks a human-readable resource name from check metadata.
- `extract_service` names the AWS service from a check title, or returns `AWS`.

## What trustscan does not do

- trustscan does not load AWS credentials or create API clients. The caller
  passes in ready clients.
- There is no command that runs a scan or writes the findings file. The only
  command is `trustscan-report`, which renders a file that already exists.