"""
Source Response Transformers

Converts raw REST JSON (as returned by the source APIs and stored in the
cache) into immutable domain records. Clients cache the raw payloads, so a
cache hit and a fresh fetch go through the same transformation.

Transformers never raise on missing optional fields: absent values become
None (or the documented default) and the calculators decide what to do.

Usage:
    from teamdash.collectors.transformers import IssueTransformer

    issues = IssueTransformer.from_search_response(payload, "customfield_10016")
"""

from typing import Any

from teamdash.domain.mobile import AnalyticsSample, CrashReport, PerformanceSample, TimingMetric
from teamdash.domain.quality import CodeQualityMetrics
from teamdash.domain.security import ScannerProject, VulnerabilityFinding
from teamdash.domain.source_control import Commit, GitLabProject, MergeRequest
from teamdash.domain.work_items import Issue, Sprint
from teamdash.utils.datetime_utils import safe_parse_timestamp


def _numeric(value: Any) -> float | None:
    """Numbers pass through; anything else (None, strings, bools) is None."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return value


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class IssueTransformer:
    """Jira issue payloads to Issue records."""

    @staticmethod
    def from_json(raw: dict[str, Any], story_points_field: str) -> Issue:
        """
        Build an Issue from one element of a Jira ``issues`` array.

        A story point value that is missing or not a number becomes None.
        """
        fields = raw.get("fields") or {}
        status = fields.get("status") or {}
        category = status.get("statusCategory") or {}
        assignee = fields.get("assignee") or {}
        priority = fields.get("priority") or {}

        return Issue(
            id=str(raw.get("id", "")),
            key=raw.get("key") or "",
            summary=fields.get("summary") or "",
            status_name=status.get("name") or "Unknown",
            status_category=category.get("key") or "",
            story_points=_numeric(fields.get(story_points_field)),
            assignee_name=assignee.get("displayName"),
            assignee_email=assignee.get("emailAddress"),
            created=safe_parse_timestamp(fields.get("created")),
            updated=safe_parse_timestamp(fields.get("updated")),
            priority=priority.get("name"),
        )

    @classmethod
    def from_search_response(cls, payload: dict[str, Any], story_points_field: str) -> list[Issue]:
        return [cls.from_json(raw, story_points_field) for raw in payload.get("issues") or []]


class SprintTransformer:
    """Jira agile sprint payloads to Sprint records."""

    @staticmethod
    def from_json(raw: dict[str, Any]) -> Sprint:
        return Sprint(
            id=str(raw.get("id", "")),
            name=raw.get("name") or "",
            state=(raw.get("state") or "").lower(),
            start_date=safe_parse_timestamp(raw.get("startDate")),
            end_date=safe_parse_timestamp(raw.get("endDate")),
            origin_board_id=str(raw["originBoardId"]) if raw.get("originBoardId") is not None else None,
        )

    @classmethod
    def from_list_response(cls, payload: dict[str, Any]) -> list[Sprint]:
        return [cls.from_json(raw) for raw in payload.get("values") or []]


class GitLabTransformer:
    """GitLab v4 payloads to merge request, commit and project records."""

    @staticmethod
    def merge_request(raw: dict[str, Any]) -> MergeRequest:
        author = raw.get("author") or {}
        return MergeRequest(
            id=str(raw.get("id", "")),
            iid=raw.get("iid"),
            title=raw.get("title") or "",
            state=raw.get("state") or "",
            author_username=author.get("username"),
            author_name=author.get("name"),
            created_at=safe_parse_timestamp(raw.get("created_at")),
            updated_at=safe_parse_timestamp(raw.get("updated_at")),
            merged_at=safe_parse_timestamp(raw.get("merged_at")),
            closed_at=safe_parse_timestamp(raw.get("closed_at")),
        )

    @staticmethod
    def commit(raw: dict[str, Any]) -> Commit:
        return Commit(
            id=raw.get("id") or "",
            author_name=raw.get("author_name"),
            author_email=raw.get("author_email"),
            created_at=safe_parse_timestamp(raw.get("created_at")),
            title=raw.get("title"),
        )

    @staticmethod
    def project(raw: dict[str, Any]) -> GitLabProject:
        return GitLabProject(
            id=str(raw.get("id", "")),
            name=raw.get("name") or "",
            last_activity_at=raw.get("last_activity_at"),
            web_url=raw.get("web_url"),
        )


class FirebaseTransformer:
    """
    Mobile analytics payloads to CrashReport / PerformanceSample / AnalyticsSample.

    Payloads use the same camelCase shape whether they come from the metrics
    service or the built-in demo data.
    """

    @staticmethod
    def _timing(raw: dict[str, Any] | None) -> TimingMetric | None:
        if not raw:
            return None
        return TimingMetric(
            average=_to_float(raw.get("average")),
            p95=_numeric(raw.get("p95")),
            trend=raw.get("trend"),
        )

    @staticmethod
    def crash_report(raw: dict[str, Any], is_demo: bool) -> CrashReport:
        return CrashReport(
            crash_free_rate=_to_float(raw.get("crashFreeRate"), 100.0),
            total_crashes=_to_int(raw.get("totalCrashes")),
            new_crashes=_to_int(raw.get("newCrashes")),
            affected_users=_to_int(raw.get("affectedUsers")),
            top_crashes=tuple(raw.get("topCrashes") or ()),
            trend=raw.get("trend"),
            is_demo=is_demo,
        )

    @classmethod
    def performance(cls, raw: dict[str, Any], is_demo: bool) -> PerformanceSample:
        return PerformanceSample(
            app_start_time=cls._timing(raw.get("appStartTime")) or TimingMetric(average=0.0),
            network_latency=cls._timing(raw.get("networkLatency")),
            screen_render_time=cls._timing(raw.get("screenRenderTime")),
            api_response_time=cls._timing(raw.get("apiResponseTime")),
            is_demo=is_demo,
        )

    @staticmethod
    def analytics(raw: dict[str, Any], is_demo: bool) -> AnalyticsSample:
        active_users = raw.get("activeUsers") or {}
        retention = raw.get("retention") or {}
        return AnalyticsSample(
            daily_active_users=_to_int(active_users.get("daily")),
            monthly_active_users=_to_int(active_users.get("monthly")),
            retention_day1=_to_float(retention.get("day1")),
            retention_day7=_to_float(retention.get("day7")),
            retention_day30=_to_float(retention.get("day30")),
            active_users_trend=active_users.get("trend"),
            session_metrics=dict(raw.get("sessionMetrics") or {}),
            engagement_metrics=dict(raw.get("engagementMetrics") or {}),
            is_demo=is_demo,
        )


class SonarQubeTransformer:
    """SonarQube measures to CodeQualityMetrics."""

    @staticmethod
    def from_measures(payload: dict[str, Any]) -> CodeQualityMetrics:
        """
        Build metrics from an ``/api/measures/component`` response.

        Ratings come back as "1.0".."5.0" from the API and are kept as given
        when they are already letters.
        """
        measures = (payload.get("component") or {}).get("measures") or []
        values = {m.get("metric"): m.get("value") for m in measures}

        return CodeQualityMetrics(
            coverage=_to_float(values.get("coverage")),
            bugs=_to_int(values.get("bugs")),
            vulnerabilities=_to_int(values.get("vulnerabilities")),
            maintainability_rating=_rating(values.get("sqale_rating")),
            code_smells=_to_int(values.get("code_smells")),
            duplicated_lines_density=_to_float(values.get("duplicated_lines_density")),
            lines_of_code=_to_int(values.get("ncloc")),
            reliability_rating=_rating(values.get("reliability_rating")),
            security_rating=_rating(values.get("security_rating")),
            technical_debt=_debt(values.get("sqale_index")),
            is_live=True,
        )

    @staticmethod
    def history(payload: dict[str, Any]) -> dict[str, list[dict[str, Any]]]:
        """Map of metric -> [{date, value}] from ``/api/measures/search_history``."""
        return {
            measure.get("metric"): [
                {"date": point.get("date"), "value": _to_float(point.get("value"))}
                for point in measure.get("history") or []
            ]
            for measure in payload.get("measures") or []
        }


def _rating(value: Any) -> str:
    if value is None:
        return "A"
    text = str(value)
    if text.isalpha():
        return text.upper()
    number = _to_int(value, 1)
    return "ABCDE"[min(max(number, 1), 5) - 1]


def _debt(value: Any) -> str:
    if value is None:
        return "0min"
    text = str(value)
    return text if not text.isdigit() else f"{text}min"


class SnykTransformer:
    """Snyk v1 payloads to scanner projects and findings."""

    @staticmethod
    def project(raw: dict[str, Any]) -> ScannerProject:
        return ScannerProject(
            id=str(raw.get("id", "")),
            name=raw.get("name") or "",
            origin=raw.get("origin"),
            type=raw.get("type"),
            read_only=bool(raw.get("readOnly")),
            test_frequency=raw.get("testFrequency"),
        )

    @staticmethod
    def finding(raw: dict[str, Any]) -> VulnerabilityFinding:
        issue_data = raw.get("issueData") or {}
        fix_info = raw.get("fixInfo") or {}
        return VulnerabilityFinding(
            id=str(raw.get("id") or issue_data.get("id") or ""),
            severity=(issue_data.get("severity") or "").lower(),
            issue_type=raw.get("issueType") or "vuln",
            title=issue_data.get("title"),
            is_fixable=bool(fix_info.get("isFixable")),
        )
