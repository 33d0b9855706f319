"""
TableReader service - Reads the flat input tables and builds event records.

Tables are read with uproot into awkward arrays, pre-filtered with
vectorised masks, and only then turned into per-event records. Row
positions are the indices used for cross-references between tables.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import awkward as ak
import numpy as np
import uproot

from k0s_resolution.domain.config import InputConfig, PreFilterConfig
from k0s_resolution.domain.events import Collision, EventRecord, McParticle, Track, V0Candidate
from k0s_resolution.services.selection.prefilter import collision_mask, selected_v0_indices


class IngestionError(Exception):
    """Input file, tree or column is missing or inconsistent."""


COLLISION_COLUMNS = ("pos_x", "pos_y", "pos_z", "sel8")

TRACK_COLUMNS = (
    "px", "py", "pz", "pt", "eta", "phi",
    "has_tpc", "has_tof", "has_trd", "its_n_cls_inner_barrel",
    "tpc_n_sigma_pi", "tof_n_sigma_pi", "tpc_n_cls_crossed_rows",
    "pid_for_tracking", "tpc_inner_param", "tpc_signal",
)

V0_COLUMNS = (
    "collision_index", "pos_track_index", "neg_track_index",
    "x", "y", "z", "px", "py", "pz", "pt", "eta", "phi", "rapidity", "mass",
    "v0_radius", "v0_cos_pa", "dca_pos_to_pv", "dca_neg_to_pv", "dca_v0_daughters",
    "px_pos", "py_pos", "pz_pos", "px_neg", "py_neg", "pz_neg",
)

MC_PARTICLE_COLUMNS = ("pdg_code", "px", "py", "pz", "pt")

MC_INDEX_COLUMN = "mc_particle_index"


@dataclass(frozen=True)
class InputTables:
    """Raw columnar tables of one input file."""

    collisions: ak.Array
    tracks: ak.Array
    v0s: ak.Array
    mc_particles: Optional[ak.Array] = None

    @property
    def is_mc(self) -> bool:
        return self.mc_particles is not None


def _columns(table: ak.Array, names) -> dict[str, np.ndarray]:
    return {name: ak.to_numpy(table[name]) for name in names}


class TableReader:
    """
    Reads the input tables of one file into EventRecords.

    In MC mode the MC particle table and the ``mc_particle_index`` columns
    of tracks and V0s are required as well.
    """

    def __init__(self, input_config: InputConfig, prefilter: PreFilterConfig, is_mc: bool = False):
        self.input_config = input_config
        self.prefilter = prefilter
        self.is_mc = is_mc
        self.logger = logging.getLogger(self.__class__.__name__)

    def required_columns(self) -> dict[str, tuple[str, ...]]:
        cfg = self.input_config
        extra = (MC_INDEX_COLUMN,) if self.is_mc else ()
        required = {
            cfg.collisions_tree: COLLISION_COLUMNS,
            cfg.tracks_tree: TRACK_COLUMNS + extra,
            cfg.v0s_tree: V0_COLUMNS + extra,
        }
        if self.is_mc:
            required[cfg.mc_particles_tree] = MC_PARTICLE_COLUMNS
        return required

    def read_tables(self) -> InputTables:
        """
        Read all required trees from the input file.

        Raises:
            IngestionError: If the file, a tree or a column is missing
        """
        path = self.input_config.path
        self.logger.info(f"Reading input tables from {path}")
        try:
            root_file = uproot.open(path)
        except FileNotFoundError as e:
            raise IngestionError(f"Input file not found: {path}") from e

        with root_file:
            tables = {
                tree_name: self._read_tree(root_file, tree_name, columns)
                for tree_name, columns in self.required_columns().items()
            }

        cfg = self.input_config
        return InputTables(
            collisions=tables[cfg.collisions_tree],
            tracks=tables[cfg.tracks_tree],
            v0s=tables[cfg.v0s_tree],
            mc_particles=tables.get(cfg.mc_particles_tree) if self.is_mc else None,
        )

    def _read_tree(self, root_file, tree_name: str, columns: tuple[str, ...]) -> ak.Array:
        if tree_name not in root_file.keys(cycle=False):
            raise IngestionError(f"Tree '{tree_name}' not found in {self.input_config.path}")
        tree = root_file[tree_name]
        missing = sorted(set(columns) - set(tree.keys()))
        if missing:
            raise IngestionError(f"Tree '{tree_name}' is missing columns: {missing}")
        arrays = tree.arrays(list(columns), library="ak")
        self.logger.debug(f"Read {len(arrays)} rows from {tree_name}")
        return arrays

    def load(self) -> list[EventRecord]:
        """Read the input file and build the pre-filtered event records."""
        return self.build_events(self.read_tables())

    def build_events(self, tables: InputTables) -> list[EventRecord]:
        """
        Apply the pre-filters and group the surviving V0s by collision.

        Every collision passing the event selection yields one EventRecord,
        including collisions without candidates.

        Args:
            tables: Raw input tables

        Returns:
            Event records ordered by collision index
        """
        if self.is_mc and not tables.is_mc:
            raise IngestionError("MC processing requested but no MC particle table was read")

        selected = np.flatnonzero(ak.to_numpy(collision_mask(tables.collisions, self.prefilter)))
        v0_rows = selected_v0_indices(tables.v0s, tables.collisions, self.prefilter)
        self.logger.info(
            f"Pre-filter kept {len(selected)}/{len(tables.collisions)} collisions "
            f"and {len(v0_rows)}/{len(tables.v0s)} V0s"
        )

        required = self.required_columns()
        mc_particles = self._build_mc_particles(tables.mc_particles) if self.is_mc else []
        track_cols = _columns(tables.tracks, required[self.input_config.tracks_tree])
        v0_cols = _columns(tables.v0s, required[self.input_config.v0s_tree])
        collision_cols = _columns(tables.collisions, COLLISION_COLUMNS)

        tracks: dict[int, Track] = {}
        v0s_by_collision: dict[int, list[V0Candidate]] = {}
        for row in v0_rows:
            row = int(row)
            pos_track = self._track(int(v0_cols["pos_track_index"][row]), track_cols, tracks, mc_particles)
            neg_track = self._track(int(v0_cols["neg_track_index"][row]), track_cols, tracks, mc_particles)
            v0 = self._build_v0(row, v0_cols, pos_track, neg_track, mc_particles)
            v0s_by_collision.setdefault(int(v0_cols["collision_index"][row]), []).append(v0)

        events = []
        for index in selected:
            index = int(index)
            collision = Collision(
                index=index,
                pos_x=float(collision_cols["pos_x"][index]),
                pos_y=float(collision_cols["pos_y"][index]),
                pos_z=float(collision_cols["pos_z"][index]),
                sel8=bool(collision_cols["sel8"][index]),
            )
            events.append(EventRecord(collision, tuple(v0s_by_collision.get(index, ()))))

        self.logger.info(f"Built {len(events)} events with {len(v0_rows)} V0 candidates")
        return events

    @staticmethod
    def _build_mc_particles(table: ak.Array) -> list[McParticle]:
        cols = _columns(table, MC_PARTICLE_COLUMNS)
        return [
            McParticle(
                index=i,
                pdg_code=int(cols["pdg_code"][i]),
                px=float(cols["px"][i]),
                py=float(cols["py"][i]),
                pz=float(cols["pz"][i]),
                pt=float(cols["pt"][i]),
            )
            for i in range(len(table))
        ]

    def _mc_particle(self, cols: dict[str, np.ndarray], row: int,
                     mc_particles: list[McParticle]) -> Optional[McParticle]:
        if not self.is_mc:
            return None
        mc_index = int(cols[MC_INDEX_COLUMN][row])
        if mc_index < 0:
            return None
        if mc_index >= len(mc_particles):
            raise IngestionError(
                f"MC particle index {mc_index} out of range ({len(mc_particles)} particles)"
            )
        return mc_particles[mc_index]

    def _track(self, index: int, cols: dict[str, np.ndarray], cache: dict[int, Track],
               mc_particles: list[McParticle]) -> Track:
        if index in cache:
            return cache[index]
        if not 0 <= index < len(cols["px"]):
            raise IngestionError(f"Track index {index} out of range ({len(cols['px'])} tracks)")

        track = Track(
            index=index,
            px=float(cols["px"][index]),
            py=float(cols["py"][index]),
            pz=float(cols["pz"][index]),
            pt=float(cols["pt"][index]),
            eta=float(cols["eta"][index]),
            phi=float(cols["phi"][index]),
            has_tpc=bool(cols["has_tpc"][index]),
            has_tof=bool(cols["has_tof"][index]),
            has_trd=bool(cols["has_trd"][index]),
            its_n_cls_inner_barrel=int(cols["its_n_cls_inner_barrel"][index]),
            tpc_n_sigma_pi=float(cols["tpc_n_sigma_pi"][index]),
            tof_n_sigma_pi=float(cols["tof_n_sigma_pi"][index]),
            tpc_n_cls_crossed_rows=float(cols["tpc_n_cls_crossed_rows"][index]),
            pid_for_tracking=int(cols["pid_for_tracking"][index]),
            tpc_inner_param=float(cols["tpc_inner_param"][index]),
            tpc_signal=float(cols["tpc_signal"][index]),
            mc_particle=self._mc_particle(cols, index, mc_particles),
        )
        cache[index] = track
        return track

    def _build_v0(self, row: int, cols: dict[str, np.ndarray], pos_track: Track,
                  neg_track: Track, mc_particles: list[McParticle]) -> V0Candidate:
        values = {
            name: float(cols[name][row])
            for name in V0_COLUMNS
            if name not in ("collision_index", "pos_track_index", "neg_track_index")
        }
        return V0Candidate(
            index=row,
            pos_track=pos_track,
            neg_track=neg_track,
            mc_particle=self._mc_particle(cols, row, mc_particles),
            **values,
        )
