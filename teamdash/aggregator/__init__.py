"""
Cross-source aggregation

    - envelope: structured fan-out returning a result-or-error per branch
    - sprints: board sprint fetching, de-duplication, ordering and selection
    - labels: filter and date-range display labels
    - overview: DashboardAggregator (the filtered overview snapshot)
    - team: TeamAggregator (team and individual endpoints)
"""
