"""
Security domain models - vulnerability scanner findings

    - VulnerabilityFinding: one aggregated issue from the scanner
    - VulnerabilityCounts: severity counts for a project (or sum over projects)
    - ScannerProject: a project monitored by the scanner
    - OrganizationSummary: sampled org-wide rollup
"""

from dataclasses import dataclass, field
from typing import Any

SEVERITIES = ("high", "medium", "low")


@dataclass(frozen=True)
class VulnerabilityFinding:
    """
    One aggregated scanner issue.

    Attributes:
        id: Scanner issue id
        severity: "high", "medium" or "low"
        issue_type: "vuln" or "license"
        title: Issue title
        is_fixable: Whether an upgrade/patch path exists
    """

    id: str
    severity: str
    issue_type: str = "vuln"
    title: str | None = None
    is_fixable: bool = False


@dataclass
class VulnerabilityCounts:
    """Severity counts, addable across projects."""

    high: int = 0
    medium: int = 0
    low: int = 0
    total: int = 0
    fixable: int = 0

    @classmethod
    def from_findings(cls, findings: list[VulnerabilityFinding]) -> "VulnerabilityCounts":
        return cls(
            high=sum(1 for f in findings if f.severity == "high"),
            medium=sum(1 for f in findings if f.severity == "medium"),
            low=sum(1 for f in findings if f.severity == "low"),
            total=len(findings),
            fixable=sum(1 for f in findings if f.is_fixable),
        )

    def add(self, other: "VulnerabilityCounts") -> None:
        self.high += other.high
        self.medium += other.medium
        self.low += other.low
        self.total += other.total
        self.fixable += other.fixable

    def to_dict(self) -> dict[str, int]:
        return {"high": self.high, "medium": self.medium, "low": self.low, "total": self.total, "fixable": self.fixable}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VulnerabilityCounts":
        return cls(**{name: int(data.get(name, 0)) for name in ("high", "medium", "low", "total", "fixable")})


@dataclass(frozen=True)
class ScannerProject:
    """A project monitored by the vulnerability scanner."""

    id: str
    name: str
    origin: str | None = None
    type: str | None = None
    read_only: bool = False
    test_frequency: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "origin": self.origin,
            "type": self.type,
            "readOnly": self.read_only,
            "testFrequency": self.test_frequency,
        }


@dataclass
class OrganizationSummary:
    """
    Org-wide vulnerability rollup.

    Only the first few projects are sampled to stay under the scanner's rate
    limits, so ``vulnerabilities`` covers ``sampled_projects`` of ``total_projects``.
    """

    total_projects: int
    sampled_projects: int
    vulnerabilities: VulnerabilityCounts = field(default_factory=VulnerabilityCounts)
    project_types: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalProjects": self.total_projects,
            "sampledProjects": self.sampled_projects,
            "vulnerabilities": self.vulnerabilities.to_dict(),
            "projectTypes": dict(self.project_types),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrganizationSummary":
        return cls(
            total_projects=data.get("totalProjects", 0),
            sampled_projects=data.get("sampledProjects", 0),
            vulnerabilities=VulnerabilityCounts.from_dict(data.get("vulnerabilities") or {}),
            project_types=dict(data.get("projectTypes") or {}),
        )
