"""ATS SOAP request templates and literal-delimiter response field extraction.

Responses are not parsed as XML. Each field of interest is located by its fixed
`<Field><![CDATA[` ... `]]></Field>` delimiter pair and the first match wins.
An absent field is a normal outcome and is reported as `None`.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
import re
from typing import Final, Mapping
from xml.sax.saxutils import escape as xml_escape

from ats_runner.domain import JobHandle, RunStatus


class AtsOperation(str, Enum):
    """ATS web service operations; values are the `/ws/{name}` path segments."""

    RUN_JOB = "RunJob"
    GET_JOB_STATUS = "GetJobStatus"
    RERUN_NOT_PASSED = "RerunNotPassed"


ERROR_MESSAGE_FIELD: Final[str] = "ErrorMessage"
JOB_ID_FIELD: Final[str] = "JobID"
EXECUTION_STATUS_FIELD: Final[str] = "ExecutionStatus"
EXECUTION_RESULT_FIELD: Final[str] = "ExecutionResult"

EXECUTION_STATUS_DONE: Final[str] = "Done"
EXECUTION_RESULT_PASSED: Final[str] = "Passed"

_ENVELOPE_HEADER: Final[str] = (
    '<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/" xmlns:men="http://www.mendix.com/">'
    "   <soapenv:Header>"
    "      <men:authentication>"
    "         <username>ATSAPIUser</username>"
    "         <password>ATSAPIPassword</password>"
    "      </men:authentication>"
    "   </soapenv:Header>"
)

_RUN_JOB_TEMPLATE: Final[str] = (
    _ENVELOPE_HEADER + "   <soapenv:Body>"
    "      <men:RunJob>"
    "         <TestRun>"
    "            <AppAPIToken>${AppAPIToken}</AppAPIToken>"
    "            <AppID>${AppId}</AppID>"
    "            <JobTemplateID>${JobTemplateID}</JobTemplateID>"
    "         </TestRun>"
    "      </men:RunJob>"
    "   </soapenv:Body>"
    "</soapenv:Envelope>"
)

_GET_JOB_STATUS_TEMPLATE: Final[str] = (
    _ENVELOPE_HEADER + "   <soapenv:Body>"
    "      <men:GetTestRun>"
    "         <TestRun>"
    "            <AppAPIToken>${AppAPIToken}</AppAPIToken>"
    "            <JobID>${JobID}</JobID>"
    "            <AppID>${AppId}</AppID>"
    "         </TestRun>"
    "      </men:GetTestRun>"
    "   </soapenv:Body>"
    "</soapenv:Envelope>"
)

_RERUN_NOT_PASSED_TEMPLATE: Final[str] = (
    _ENVELOPE_HEADER + "   <soapenv:Body>"
    "      <men:RerunNotPassed>"
    "         <RerunNotPassed>"
    "            <AppAPIToken>${AppAPIToken}</AppAPIToken>"
    "            <AppID>${AppId}</AppID>"
    "            <FinishedJobID>${FinishedJobID}</FinishedJobID>"
    "         </RerunNotPassed>"
    "      </men:RerunNotPassed>"
    "   </soapenv:Body>"
    "</soapenv:Envelope>"
)

REQUEST_TEMPLATES: Final[dict[AtsOperation, str]] = {
    AtsOperation.RUN_JOB: _RUN_JOB_TEMPLATE,
    AtsOperation.GET_JOB_STATUS: _GET_JOB_STATUS_TEMPLATE,
    AtsOperation.RERUN_NOT_PASSED: _RERUN_NOT_PASSED_TEMPLATE,
}

_PLACEHOLDER_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Za-z]+)\}")


def codec_template_placeholders(operation: AtsOperation) -> tuple[str, ...]:
    """Return placeholder names of an operation template in document order.

    Args:
        operation: ATS operation.

    Returns:
        tuple[str, ...]: Placeholder names without the `${}` wrapper.
    """

    return tuple(_PLACEHOLDER_PATTERN.findall(REQUEST_TEMPLATES[operation]))


def codec_build_request(
    operation: AtsOperation,
    params: Mapping[str, str],
    escape_values: bool = True,
) -> str:
    """Build one outgoing request body by literal placeholder substitution.

    Values are XML-escaped by default. Identifier-style values contain none of
    the escaped characters, so the body stays byte-identical to raw
    substitution for them.

    Args:
        operation: ATS operation whose template is used.
        params: Placeholder values keyed by placeholder name.
        escape_values: Whether `&`, `<` and `>` in values are escaped.

    Returns:
        str: Request body.

    Raises:
        ValueError: Raised when a template placeholder has no value.
    """

    missing_names = [name for name in codec_template_placeholders(operation) if name not in params]
    if missing_names:
        raise ValueError(f"missing request parameters {', '.join(missing_names)} for operation={operation.value}")

    def _substitute(match: re.Match[str]) -> str:
        raw_value = str(params[match.group(1)])
        return xml_escape(raw_value) if escape_values else raw_value

    # single pass, so a value that looks like a placeholder is never expanded
    return _PLACEHOLDER_PATTERN.sub(_substitute, REQUEST_TEMPLATES[operation])


@lru_cache(maxsize=None)
def _codec_field_pattern(field_name: str) -> re.Pattern[str]:
    open_marker = f"<{field_name}><![CDATA["
    close_marker = f"]]></{field_name}>"
    return re.compile(re.escape(open_marker) + "(.*?)" + re.escape(close_marker), re.DOTALL)


def codec_extract_field(response_body: str, field_name: str) -> str | None:
    """Return inner content of the first delimited occurrence of a field.

    Args:
        response_body: Raw response body.
        field_name: Element name, e.g. `JobID`.

    Returns:
        str | None: First match content, or None when the field is absent.
    """

    match = _codec_field_pattern(field_name).search(response_body)
    if match is None:
        return None
    return match.group(1)


def codec_parse_job_handle(response_body: str) -> JobHandle:
    """Interpret a RunJob or RerunNotPassed response.

    The error field takes precedence: when `ErrorMessage` is present the handle
    is rejected even if a `JobID` is present too.

    Args:
        response_body: Raw response body.

    Returns:
        JobHandle: Started handle with job id, or rejected handle with message.
    """

    error_message = codec_extract_field(response_body, ERROR_MESSAGE_FIELD)
    if error_message is not None:
        return JobHandle.handle_rejected(error_message)

    job_id = codec_extract_field(response_body, JOB_ID_FIELD)
    if job_id is None or not job_id.strip():
        return JobHandle.handle_rejected(f"response carried neither {ERROR_MESSAGE_FIELD} nor a {JOB_ID_FIELD}")
    return JobHandle.handle_started(job_id)


def codec_parse_run_status(response_body: str) -> RunStatus:
    """Interpret a GetJobStatus response.

    Args:
        response_body: Raw response body.

    Returns:
        RunStatus: Parsed status; `passed` is never set unless `done` is.
    """

    done = codec_extract_field(response_body, EXECUTION_STATUS_FIELD) == EXECUTION_STATUS_DONE
    passed = done and codec_extract_field(response_body, EXECUTION_RESULT_FIELD) == EXECUTION_RESULT_PASSED
    return RunStatus(
        done=done,
        passed=passed,
        error_message=codec_extract_field(response_body, ERROR_MESSAGE_FIELD),
    )
