"""
Shared fixtures and record factories for the test suite.
"""

from collections import defaultdict

import pytest

from k0s_resolution.domain.events import Collision, EventRecord, McParticle, Track, V0Candidate


class RecordingSink:
    """Histogram sink that remembers every fill."""

    def __init__(self):
        self.fills = []

    def fill(self, name, *values):
        self.fills.append((name, tuple(values)))

    def values(self, name):
        return [values for hist_name, values in self.fills if hist_name == name]

    def count(self, name):
        return len(self.values(name))

    def counts(self):
        result = defaultdict(int)
        for name, _ in self.fills:
            result[name] += 1
        return dict(result)


def make_collision(**overrides) -> Collision:
    values = dict(index=0, pos_x=0.0, pos_y=0.0, pos_z=0.0, sel8=True)
    values.update(overrides)
    return Collision(**values)


def make_mc_particle(pdg_code=211, px=0.6, py=0.8, pz=0.5, index=0) -> McParticle:
    return McParticle(
        index=index,
        pdg_code=pdg_code,
        px=px,
        py=py,
        pz=pz,
        pt=(px * px + py * py) ** 0.5,
    )


def make_track(**overrides) -> Track:
    """Track that passes every daughter cut with default settings."""
    values = dict(
        index=0,
        px=0.6,
        py=0.8,
        pz=0.5,
        pt=1.0,
        eta=0.3,
        phi=0.9,
        has_tpc=True,
        has_tof=False,
        has_trd=False,
        its_n_cls_inner_barrel=3,
        tpc_n_sigma_pi=0.5,
        tof_n_sigma_pi=0.0,
        tpc_n_cls_crossed_rows=120.0,
        pid_for_tracking=2,
        tpc_inner_param=1.1,
        tpc_signal=55.0,
        mc_particle=None,
    )
    values.update(overrides)
    return Track(**values)


def make_v0(pos_track=None, neg_track=None, **overrides) -> V0Candidate:
    """Candidate that passes the selection cascade with default settings."""
    values = dict(
        index=0,
        pos_track=pos_track if pos_track is not None else make_track(index=1),
        neg_track=neg_track if neg_track is not None else make_track(
            index=2, px=-0.3, py=0.4, pz=0.2, pt=0.5, eta=-0.2, phi=2.2,
            tpc_inner_param=0.6, tpc_signal=70.0,
        ),
        x=1.0,
        y=1.0,
        z=0.0,
        px=0.3,
        py=1.2,
        pz=0.7,
        pt=1.237,
        eta=0.55,
        phi=1.33,
        rapidity=0.1,
        mass=0.4976,
        v0_radius=1.414,
        v0_cos_pa=0.999,
        dca_pos_to_pv=0.5,
        dca_neg_to_pv=0.5,
        dca_v0_daughters=0.2,
        px_pos=0.6,
        py_pos=0.8,
        pz_pos=0.5,
        px_neg=-0.3,
        py_neg=0.4,
        pz_neg=0.2,
        mc_particle=None,
    )
    values.update(overrides)
    return V0Candidate(**values)


def make_mc_v0(true_k0s=True, pos_pdg=211, neg_pdg=-211, **overrides) -> V0Candidate:
    """Candidate whose daughters carry MC truth."""
    pos_truth = make_mc_particle(pdg_code=pos_pdg, px=0.5, py=0.8, pz=0.5, index=1)
    neg_truth = make_mc_particle(pdg_code=neg_pdg, px=-0.3, py=0.5, pz=0.25, index=2)
    mother = make_mc_particle(pdg_code=310 if true_k0s else 3122, px=0.2, py=1.3, pz=0.75)
    overrides.setdefault("mc_particle", mother)
    return make_v0(
        pos_track=make_track(index=1, mc_particle=pos_truth),
        neg_track=make_track(index=2, px=-0.3, py=0.4, pz=0.2, pt=0.5, eta=-0.2,
                             mc_particle=neg_truth),
        **overrides,
    )


def make_event(*v0s, collision=None) -> EventRecord:
    return EventRecord(collision if collision is not None else make_collision(), tuple(v0s))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def collision():
    return make_collision()
