"""
Upstream data providers: ESPN, CollegeFootballData.com and NCAA multi-division.
"""
from .http import UpstreamError, fetch_json
from .espn_client import TeamNotFoundError

__all__ = ["UpstreamError", "fetch_json", "TeamNotFoundError"]
