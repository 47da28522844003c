'''
Deep Dive Backend Test Suite

Test Modules:
-------------
- test_derived_metrics.py: Fill rates, effective eCPM, change percentages
  - Zero-denominator policy (never NaN / infinity)
  - Zero-baseline changes are 0

- test_tiering.py: Revenue ranking and Pareto tiers
  - Inclusive 80 / 95 boundaries
  - Stable ordering of ties, zero-revenue populations

- test_lifecycle.py: New / lost / existing and lost impact
  - Display tier and tier group labels
  - Bounded concurrent history lookups

- test_health_warnings.py: Rule table bands, priority selection, messages

- test_summary.py: Totals, blended eCPM, tier breakdown

- test_team_aggregation.py: Team rows from pic rows and membership

- test_deep_dive.py: Whole pipeline over an in-memory warehouse
  - Team perspective and team filters
  - Drill-down and tier filter
  - Validation before fetch, adapter failures

- test_queries.py: Parameterized BigQuery SQL

- test_adapters.py: BigQuery and Postgres adapters against mocks

- test_api.py: HTTP status mapping of the router (integration)

Running Tests:
--------------
    pip install -e ".[test]"
    pytest deepdive/tests/ -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
