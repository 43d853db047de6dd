"""
PromQL Trigger

Event source that polls PromQL queries against log-cache and invokes
function webhooks whenever a query returns data.
"""

__version__ = "1.0.0"
