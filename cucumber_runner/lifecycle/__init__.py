"""Run lifecycle: entity tree, identity matching, state synchronization, config."""

from cucumber_runner.lifecycle.config import RunnerConfig
from cucumber_runner.lifecycle.entities import EntityKind, RunState, TestEntity
from cucumber_runner.lifecycle.matcher import resolve, strip_tags
from cucumber_runner.lifecycle.synchronizer import (
    RunSession,
    StatusSynchronizer,
    TestTreeListener,
    aggregate_states,
)

__all__ = [
    "EntityKind",
    "RunSession",
    "RunState",
    "RunnerConfig",
    "StatusSynchronizer",
    "TestEntity",
    "TestTreeListener",
    "aggregate_states",
    "resolve",
    "strip_tags",
]
