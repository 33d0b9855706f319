"""
Event-related domain models.

Immutable records for one collision, its tracks and its V0 candidates.
MC-only fields are optional and stay None when processing data.
"""

import math
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class McParticle:
    """Generated particle from the simulation."""

    index: int
    pdg_code: int
    px: float
    py: float
    pz: float
    pt: float


@dataclass(frozen=True)
class Collision:
    """Reconstructed collision (primary vertex)."""

    index: int
    pos_x: float
    pos_y: float
    pos_z: float
    sel8: bool = True


@dataclass(frozen=True)
class Track:
    """Reconstructed charged track with the PID and detector flags used in the cuts."""

    index: int
    px: float
    py: float
    pz: float
    pt: float
    eta: float
    phi: float
    has_tpc: bool
    has_tof: bool
    has_trd: bool
    its_n_cls_inner_barrel: int
    tpc_n_sigma_pi: float
    tof_n_sigma_pi: float
    tpc_n_cls_crossed_rows: float
    pid_for_tracking: int
    tpc_inner_param: float = 0.0
    tpc_signal: float = 0.0
    mc_particle: Optional[McParticle] = None

    @property
    def has_mc_particle(self) -> bool:
        return self.mc_particle is not None


@dataclass(frozen=True)
class V0Candidate:
    """
    K0s candidate built from one positive and one negative daughter.

    Kinematic attributes (mass, rapidity, pt, ...) are computed upstream
    under the K0s hypothesis. The daughter momenta ``p{x,y,z}_{pos,neg}``
    are taken at the decay vertex and can differ from the track momenta.
    """

    index: int
    pos_track: Track
    neg_track: Track
    x: float
    y: float
    z: float
    px: float
    py: float
    pz: float
    pt: float
    eta: float
    phi: float
    rapidity: float
    mass: float
    v0_radius: float
    v0_cos_pa: float
    dca_pos_to_pv: float
    dca_neg_to_pv: float
    dca_v0_daughters: float
    px_pos: float
    py_pos: float
    pz_pos: float
    px_neg: float
    py_neg: float
    pz_neg: float
    mc_particle: Optional[McParticle] = None

    @property
    def p(self) -> float:
        """Total momentum."""
        return math.sqrt(self.px * self.px + self.py * self.py + self.pz * self.pz)

    @property
    def positive_pt(self) -> float:
        return math.hypot(self.px_pos, self.py_pos)

    @property
    def negative_pt(self) -> float:
        return math.hypot(self.px_neg, self.py_neg)

    @property
    def has_mc_particle(self) -> bool:
        return self.mc_particle is not None

    def distance_over_momentum(self, collision: Collision) -> float:
        """
        Decay length divided by total momentum.

        Multiplied by the K0s mass this gives the proper decay length c*t.
        """
        decay_length = math.sqrt(
            (self.x - collision.pos_x) ** 2
            + (self.y - collision.pos_y) ** 2
            + (self.z - collision.pos_z) ** 2
        )
        return decay_length / (self.p + 1e-10)


@dataclass(frozen=True)
class EventRecord:
    """One collision with the V0 candidates that survived the pre-filter."""

    collision: Collision
    v0s: tuple[V0Candidate, ...] = field(default_factory=tuple)

    @property
    def candidate_count(self) -> int:
        return len(self.v0s)
