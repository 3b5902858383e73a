"""
Per-source metric calculators

Pure functions (no I/O) that turn domain records into rollups:
    - issues: story points, completion, groupings, velocity, cycle time
    - merge_requests: merge request totals, by author, daily activity
    - activity: chat channel and team message counts
    - burndown: sprint length and burndown series
    - health: mobile health score and recommendations
    - identity / developers: cross-source developer rollup
    - time_series: daily seeding and weekly keys
"""
