"""
Tests for the vectorised event and V0 pre-filters.
"""

import awkward as ak
import numpy as np
import pytest

from k0s_resolution.domain.config import PreFilterConfig
from k0s_resolution.services.selection import (
    collision_mask,
    selected_v0_indices,
    v0_mask,
)


@pytest.fixture
def collisions():
    return ak.Array({
        "pos_x": [0.0, 0.0, 0.0, 0.0],
        "pos_y": [0.0, 0.0, 0.0, 0.0],
        "pos_z": [1.0, -12.0, 3.0, 9.9],
        "sel8": [True, True, False, True],
    })


@pytest.fixture
def v0s():
    return ak.Array({
        "collision_index": [0, 0, 1, 2, 3, 3],
        "dca_pos_to_pv": [0.5, 0.05, 0.5, 0.5, -0.5, 0.5],
        "dca_neg_to_pv": [0.5, 0.5, 0.5, 0.5, -0.3, 0.5],
        "dca_v0_daughters": [0.2, 0.2, 0.2, 0.2, 0.2, 1.5],
        "v0_cos_pa": [0.999, 0.999, 0.999, 0.999, 0.998, 0.999],
    })


class TestCollisionMask:
    """Tests for the event pre-filter."""

    def test_z_vertex_and_event_selection(self, collisions):
        mask = collision_mask(collisions, PreFilterConfig())
        assert ak.to_list(mask) == [True, False, False, True]

    def test_event_selection_disabled(self, collisions):
        mask = collision_mask(collisions, PreFilterConfig(event_selection=False))
        assert ak.to_list(mask) == [True, False, True, True]

    def test_tighter_z_window(self, collisions):
        mask = collision_mask(collisions, PreFilterConfig(cut_z_vertex=5.0))
        assert ak.to_list(mask) == [True, False, False, False]

    def test_empty(self):
        empty = ak.Array({"pos_z": np.zeros(0), "sel8": np.zeros(0, dtype=bool)})
        assert len(collision_mask(empty, PreFilterConfig())) == 0


class TestV0Mask:
    """Tests for the topological V0 pre-filter."""

    def test_v0_cuts(self, v0s):
        mask = v0_mask(v0s, PreFilterConfig())
        # DCA to PV uses the magnitude, so row 4 passes on DCA
        assert ak.to_list(mask) == [True, False, True, True, True, False]

    def test_cos_pa(self, v0s):
        mask = v0_mask(v0s, PreFilterConfig(cos_pa=0.9985))
        assert ak.to_list(mask)[4] is False


class TestSelectedV0Indices:
    """Tests for combining V0 and collision pre-filters."""

    def test_v0s_of_rejected_collisions_are_dropped(self, v0s, collisions):
        rows = selected_v0_indices(v0s, collisions, PreFilterConfig())
        assert rows.tolist() == [0, 4]

    def test_out_of_range_collision_index(self, collisions):
        v0s = ak.Array({
            "collision_index": [7, -1],
            "dca_pos_to_pv": [0.5, 0.5],
            "dca_neg_to_pv": [0.5, 0.5],
            "dca_v0_daughters": [0.2, 0.2],
            "v0_cos_pa": [0.999, 0.999],
        })
        assert selected_v0_indices(v0s, collisions, PreFilterConfig()).tolist() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
