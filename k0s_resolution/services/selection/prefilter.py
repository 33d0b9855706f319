"""
Coarse pre-filters on collisions and V0 candidates.

Vectorised over the columnar tables before any per-candidate record is
built. The selection cascade assumes these cuts have already been applied.
"""
import awkward as ak
import numpy as np

from k0s_resolution.domain.config import PreFilterConfig


def collision_mask(collisions: ak.Array, config: PreFilterConfig) -> ak.Array:
    """
    Event selection and z-vertex window.

    (not event_selection or sel8) and |pos_z| < cut_z_vertex
    """
    if len(collisions) == 0:
        return ak.Array(np.zeros(0, dtype=bool))

    mask = np.abs(collisions.pos_z) < config.cut_z_vertex
    if config.event_selection:
        mask = mask & ak.values_astype(collisions.sel8, bool)
    return mask


def v0_mask(v0s: ak.Array, config: PreFilterConfig) -> ak.Array:
    """
    Topological V0 cuts.

    |dca_pos_to_pv| > dca_pos_to_pv and |dca_neg_to_pv| > dca_neg_to_pv
    and dca_v0_daughters < dca_v0_daughters and v0_cos_pa > cos_pa
    """
    if len(v0s) == 0:
        return ak.Array(np.zeros(0, dtype=bool))

    return (
        (np.abs(v0s.dca_pos_to_pv) > config.dca_pos_to_pv)
        & (np.abs(v0s.dca_neg_to_pv) > config.dca_neg_to_pv)
        & (v0s.dca_v0_daughters < config.dca_v0_daughters)
        & (v0s.v0_cos_pa > config.cos_pa)
    )


def selected_v0_indices(v0s: ak.Array, collisions: ak.Array,
                        config: PreFilterConfig) -> np.ndarray:
    """
    Row positions of the V0s that pass the V0 cuts and belong to a
    selected collision.

    Args:
        v0s: V0 table with a ``collision_index`` column
        collisions: Collision table, row position is the collision index
        config: Pre-filter thresholds
    """
    if len(v0s) == 0:
        return np.zeros(0, dtype=np.int64)

    selected_collisions = ak.to_numpy(collision_mask(collisions, config))
    collision_index = ak.to_numpy(v0s.collision_index).astype(np.int64)
    in_range = (collision_index >= 0) & (collision_index < len(selected_collisions))

    collision_ok = np.zeros(len(collision_index), dtype=bool)
    collision_ok[in_range] = selected_collisions[collision_index[in_range]]

    mask = ak.to_numpy(v0_mask(v0s, config)) & collision_ok
    return np.flatnonzero(mask)
