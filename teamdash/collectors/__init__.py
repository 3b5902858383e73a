"""
Source clients

One async client per external source, all built on SourceClient
(collectors.base) and reading through the shared TTL cache:
    - JiraClient, GitLabClient, FirebaseClient, SonarQubeClient,
      SnykClient, SlackClient
    - StaticCodeQualityProvider (default code quality figures)
    - transformers: raw JSON payloads -> domain records
"""
