"""Feature file discovery into the static test entity tree."""

from cucumber_runner.discovery.feature_parser import (
    discover_features,
    parse_feature,
    parse_feature_file,
    select_entities,
)

__all__ = [
    "discover_features",
    "parse_feature",
    "parse_feature_file",
    "select_entities",
]
