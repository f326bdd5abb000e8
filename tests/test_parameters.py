"""Tests for saving and loading parameters."""

import pytest
import yaml

from pixfeat.core import (
    HarrisParams,
    HoughParams,
    ParameterOutOfRangeError,
    load_parameters,
    save_parameters,
    update_params,
)


def test_save_and_load(tmp_path):
    """Saved parameters load back unchanged."""
    filename = tmp_path / "params.yaml"
    hough = HoughParams(vote_threshold=42, axis_tolerance=0.2)
    harris = HarrisParams(k=0.06, policy="strict")
    save_parameters(hough, harris, filename)
    assert load_parameters(filename) == (hough, harris)


def test_missing_keys_use_defaults(tmp_path):
    """Sections and keys left out of the file keep their defaults."""
    filename = tmp_path / "params.yaml"
    filename.write_text(yaml.dump({"harris": {"block_size": 3}}))
    hough, harris = load_parameters(filename)
    assert hough == HoughParams()
    assert harris.block_size == 3
    assert harris.k == HarrisParams().k


def test_unknown_keys_are_rejected(tmp_path):
    """Typos in the file are reported instead of ignored."""
    filename = tmp_path / "params.yaml"
    filename.write_text(yaml.dump({"hough": {"vote_treshold": 3}}))
    with pytest.raises(ParameterOutOfRangeError):
        load_parameters(filename)
    filename.write_text(yaml.dump({"sift": {}}))
    with pytest.raises(ParameterOutOfRangeError):
        load_parameters(filename)


def test_update_params_skips_none():
    """Only explicit overrides replace values."""
    params = update_params(HoughParams(), vote_threshold=7, max_lines=None)
    assert params.vote_threshold == 7
    assert params.max_lines == HoughParams().max_lines
