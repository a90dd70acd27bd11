"""Tests for config.py — option validation and environment overrides."""

from __future__ import annotations

import pytest

from canvas_flow.config import NODE_GAP, NODE_WIDTH, LayoutOptions


def test_defaults():
    opts = LayoutOptions()
    assert opts.node_width == NODE_WIDTH
    assert opts.node_gap == NODE_GAP
    assert opts.placement == "below"
    assert opts.id_policy == "isolate"


@pytest.mark.parametrize("kwargs", [
    {"placement": "diagonal"},
    {"id_policy": "merge"},
    {"node_width": 0},
    {"rank_gap": -1},
])
def test_invalid_options_rejected(kwargs):
    with pytest.raises(ValueError):
        LayoutOptions(**kwargs)


def test_from_env_overrides():
    env = {
        "CANVAS_FLOW_NODE_GAP": "12",
        "CANVAS_FLOW_PLACEMENT": "right",
        "CANVAS_FLOW_ID_POLICY": "share_nodes",
        "CANVAS_FLOW_PREFIX_BASE": "frag",
        "UNRELATED": "x",
    }
    opts = LayoutOptions.from_env(env)
    assert opts.node_gap == 12.0
    assert opts.placement == "right"
    assert opts.id_policy == "share_nodes"
    assert opts.prefix_base == "frag"
    assert opts.rank_gap == LayoutOptions().rank_gap


def test_from_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv("CANVAS_FLOW_RANK_GAP", "33")
    assert LayoutOptions.from_env().rank_gap == 33.0


def test_from_env_bad_number():
    with pytest.raises(ValueError, match="CANVAS_FLOW_NODE_WIDTH"):
        LayoutOptions.from_env({"CANVAS_FLOW_NODE_WIDTH": "wide"})
