"""
Domain Models - Type-safe data structures for dashboard metrics

This package contains dataclasses representing the records fetched from each
source and the rollups built from them:
    - work_items: Issue, Sprint
    - source_control: MergeRequest, Commit, ProjectRollup, SourceControlSummary
    - developer: Developer
    - mobile: CrashReport, PerformanceSample, AnalyticsSample, MobileHealth
    - quality: CodeQualityMetrics
    - security: VulnerabilityFinding, VulnerabilityCounts, OrganizationSummary
    - snapshot: DashboardSnapshot and its parts

Usage:
    from teamdash.domain import Issue, Sprint

    if issue.is_completed:
        print(f"{issue.key} is done")
"""

from .developer import Developer
from .mobile import AnalyticsSample, CrashReport, MobileHealth, PerformanceSample, TimingMetric
from .quality import CodeQualityMetrics
from .security import OrganizationSummary, ScannerProject, VulnerabilityCounts, VulnerabilityFinding
from .snapshot import (
    NO_DEVELOPER_ACTIVITY_MESSAGE,
    NO_SPRINTS_MESSAGE,
    BurndownPoint,
    DashboardSnapshot,
    DateRange,
    SourceError,
    SprintMetrics,
    SprintPanel,
    SprintSelectionState,
)
from .source_control import Commit, GitLabProject, MergeRequest, ProjectRollup, SourceControlSummary
from .work_items import Issue, Sprint

__all__ = [
    # Issue tracker
    "Issue",
    "Sprint",
    # Source control
    "MergeRequest",
    "Commit",
    "GitLabProject",
    "ProjectRollup",
    "SourceControlSummary",
    # People
    "Developer",
    # Mobile
    "TimingMetric",
    "CrashReport",
    "PerformanceSample",
    "AnalyticsSample",
    "MobileHealth",
    # Quality / security
    "CodeQualityMetrics",
    "VulnerabilityFinding",
    "VulnerabilityCounts",
    "ScannerProject",
    "OrganizationSummary",
    # Snapshot
    "NO_DEVELOPER_ACTIVITY_MESSAGE",
    "NO_SPRINTS_MESSAGE",
    "SourceError",
    "DateRange",
    "SprintMetrics",
    "BurndownPoint",
    "SprintPanel",
    "SprintSelectionState",
    "DashboardSnapshot",
]
