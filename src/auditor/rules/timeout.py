# src/auditor/rules/timeout.py
import re
from typing import List, Optional

from action_ir.model import ActionNode
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.model import Issue, IssueFix, Severity

TIMER_CALLS = ("setTimeout", "setInterval")

TWENTY_HOURS_MS = 20 * 60 * 60 * 1000
SHORT_SESSION_MS = 5 * 60 * 1000

SESSION_PATTERN = re.compile(r"session|timeout|expir|logout|auth|token", re.IGNORECASE)
REDIRECT_PATTERN = re.compile(
    r"location\s*\.\s*(href|assign|replace)|window\s*\.\s*(location|open)|history\s*\.\s*push",
    re.IGNORECASE,
)
COUNTDOWN_PATTERN = re.compile(r"countdown|timer|remaining|left", re.IGNORECASE)
INACTIVITY_PATTERN = re.compile(r"inactiv|idle", re.IGNORECASE)

_DELAY_ARGUMENT = re.compile(r"set(?:Timeout|Interval)\s*\([^,]+,\s*(\d+)\s*\)")
_MINUTES_EXPRESSION = re.compile(r"(\d+)\s*\*\s*60\s*\*\s*1000")
_TIMER_NAMES = re.compile(r"\b(?:set|clear)(?:Timeout|Interval)\b")


def _api_call(node: ActionNode) -> str:
    return str(node.metadata.get("apiCall") or "")


def _source(node: ActionNode) -> str:
    return str(node.metadata.get("sourceCode") or "")


def _body(node: ActionNode) -> str:
    """Source text without the timer API names, which would match the keyword patterns."""
    return _TIMER_NAMES.sub(" ", _source(node))


def duration_ms(node: ActionNode) -> Optional[int]:
    """Delay from metadata, else from the call's source text."""
    explicit = node.metadata.get("timeoutDuration")
    if explicit is not None:
        try:
            return int(explicit)
        except (TypeError, ValueError):
            return None
    code = _source(node)
    match = _DELAY_ARGUMENT.search(code)
    if match:
        return int(match.group(1))
    match = _MINUTES_EXPRESSION.search(code)
    if match:
        return int(match.group(1)) * 60 * 1000
    return None


def format_duration(ms: Optional[int]) -> str:
    if ms is None:
        return "unknown duration"
    if ms < 1000:
        return f"{ms}ms"
    if ms < 60_000:
        return f"{ms / 1000:.0f} seconds"
    if ms < 3_600_000:
        return f"{ms / 60_000:.0f} minutes"
    return f"{ms / 3_600_000:.1f} hours"


def _timers(context: AuditContext) -> List[ActionNode]:
    return [n for n in context.actions.get_all_timers() if _api_call(n) in TIMER_CALLS]


@audit_spec(codes=["automatic-redirect-no-control"])
def check_automatic_redirect(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    for node in _timers(context):
        if not REDIRECT_PATTERN.search(_source(node)):
            continue
        issues.append(factory.create(
            context,
            "automatic-redirect-no-control",
            Severity.WARNING,
            f"Automatic redirect detected with {format_duration(duration_ms(node))} delay. Users must be able "
            f"to turn off, adjust, or extend time limits. Provide a manual redirect option or allow users to "
            f"disable automatic redirect.",
            node.location,
            ["2.2.1"],
            fix=IssueFix(
                description="Provide user control over redirect",
                code='<a href="/next">Continue</a>  <!-- instead of redirecting automatically -->',
                location=node.location,
            ),
        ))
    return issues


@audit_spec(codes=["session-timeout-no-warning"])
def check_session_timeout(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """Session expiry timers; under five minutes they are errors."""
    issues = []
    for node in _timers(context):
        if not SESSION_PATTERN.search(_body(node)):
            continue
        duration = duration_ms(node)
        short = duration is not None and duration < SHORT_SESSION_MS
        issues.append(factory.create(
            context,
            "session-timeout-no-warning",
            Severity.ERROR if short else Severity.WARNING,
            f"Session timeout detected ({format_duration(duration)}) without visible warning mechanism. Users "
            f"must be warned at least 20 seconds before the session expires and given a simple way to extend it.",
            node.location,
            ["2.2.1"],
            fix=IssueFix(
                description="Add session timeout warning with extension option",
                code=(
                    "warningTimer = setTimeout(showSessionWarning, SESSION_DURATION - WARNING_TIME);\n"
                    "sessionTimer = setTimeout(logoutUser, SESSION_DURATION);"
                ),
                location=node.location,
            ),
        ))
    return issues


@audit_spec(codes=["countdown-timer-no-extension", "inactivity-timeout-too-short"])
def check_time_limits(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    for node in _timers(context):
        duration = duration_ms(node)
        if not duration or duration <= 0 or duration >= TWENTY_HOURS_MS:
            continue
        code = _body(node)
        if COUNTDOWN_PATTERN.search(code):
            issues.append(factory.create(
                context,
                "countdown-timer-no-extension",
                Severity.WARNING,
                f"Countdown timer detected ({format_duration(duration)}) without extension mechanism. If this "
                f"timer limits the time to complete a task, users must be able to extend it with a simple action.",
                node.location,
                ["2.2.1"],
                fix=IssueFix(
                    description="Add time extension capability",
                    code='<button type="button" onclick="extendTimer()">Add 5 more minutes</button>',
                    location=node.location,
                ),
            ))
        if INACTIVITY_PATTERN.search(code):
            issues.append(factory.create(
                context,
                "inactivity-timeout-too-short",
                Severity.INFO,
                f"Inactivity timeout detected ({format_duration(duration)}, {duration / 3_600_000:.1f} hours). "
                f"Timeouts under 20 hours are only allowed if user data is preserved after re-authenticating.",
                node.location,
                ["2.2.1"],
            ))
    return issues


@audit_spec(codes=["uncontrolled-auto-update"])
def check_uncleared_intervals(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """setInterval with no clearInterval anywhere in the model."""
    timers = context.actions.get_all_timers()
    if any(_api_call(n) == "clearInterval" for n in timers):
        return []
    issues = []
    for node in timers:
        if _api_call(node) != "setInterval":
            continue
        issues.append(factory.create(
            context,
            "uncontrolled-auto-update",
            Severity.WARNING,
            "setInterval without clearInterval - auto-updating content cannot be paused or stopped by user.",
            node.location,
            ["2.2.2"],
            fix=IssueFix(
                description="Let users pause the update",
                code="pauseButton.addEventListener('click', () => clearInterval(intervalId));",
                location=node.location,
            ),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="timeout",
    description="Detects time limits, timeouts and auto-updates users cannot control",
    audit_rules=[check_automatic_redirect, check_session_timeout, check_time_limits, check_uncleared_intervals],
)
