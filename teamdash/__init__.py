"""
Team Performance Dashboard - cross-source metrics aggregation service

Fans out to Jira, GitLab, Firebase, SonarQube, Snyk and Slack, merges the
results into per-developer and per-project rollups and serves them over a
FastAPI endpoint.
"""

__version__ = "1.0.0"
