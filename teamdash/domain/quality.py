"""
Code quality domain model - scanner measures for a project or filter
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CodeQualityMetrics:
    """
    Code quality measures.

    Attributes:
        coverage: Line coverage percentage
        bugs: Open reliability issues
        vulnerabilities: Open security issues
        maintainability_rating: "A".."E"
        code_smells / duplicated_lines_density / lines_of_code: Optional scanner measures
        reliability_rating / security_rating / technical_debt: Optional scanner measures
        is_live: False for the static lookup table, True for scanner results

    Example:
        metrics = CodeQualityMetrics(coverage=82.3, bugs=1, vulnerabilities=0, maintainability_rating="A")
        metrics.has_vulnerabilities  # False
    """

    coverage: float
    bugs: int
    vulnerabilities: int
    maintainability_rating: str = "A"
    code_smells: int | None = None
    duplicated_lines_density: float | None = None
    lines_of_code: int | None = None
    reliability_rating: str | None = None
    security_rating: str | None = None
    technical_debt: str | None = None
    is_live: bool = False

    @property
    def has_vulnerabilities(self) -> bool:
        return self.vulnerabilities > 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "coverage": self.coverage,
            "bugs": self.bugs,
            "vulnerabilities": self.vulnerabilities,
            "maintainabilityRating": self.maintainability_rating,
            "isLive": self.is_live,
        }
        optional = {
            "codeSmells": self.code_smells,
            "duplicatedLinesDensity": self.duplicated_lines_density,
            "linesOfCode": self.lines_of_code,
            "reliabilityRating": self.reliability_rating,
            "securityRating": self.security_rating,
            "technicalDebt": self.technical_debt,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data
