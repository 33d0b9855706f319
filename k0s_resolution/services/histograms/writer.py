"""
Writes a HistogramRegistry to disk.

Dense histograms go to a ROOT file through uproot. Sparse histograms are
not representable as TH1/TH2/TH3, so each is stored beside the ROOT file
as ``<stem>_<name>.npz`` with the populated bin indices, their contents and
the axis edges.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
import uproot

from k0s_resolution.services.histograms.registry import HistogramRegistry, SparseHistogram

logger = logging.getLogger(__name__)


def sparse_output_path(root_path: Path, hist_name: str) -> Path:
    return root_path.with_name(f"{root_path.stem}_{hist_name}.npz")


def write_sparse(histogram: SparseHistogram, path: Union[str, Path]) -> Path:
    """
    Save a sparse histogram as a compressed NumPy archive.

    Keys: ``indices`` (N x ndim bin indices, -1 underflow, bins overflow),
    ``counts`` (N), ``names`` and ``edges_<i>`` for each axis.
    """
    path = Path(path)
    indices, counts = histogram.to_arrays()
    arrays = {
        "indices": indices,
        "counts": counts,
        "names": np.asarray([ax.name for ax in histogram.axes]),
    }
    for i, ax in enumerate(histogram.axes):
        arrays[f"edges_{i}"] = np.asarray(ax.edges)
    np.savez_compressed(path, **arrays)
    return path


def write_registry(registry: HistogramRegistry, output_path: Union[str, Path]) -> list[str]:
    """
    Write every booked histogram.

    Args:
        registry: Filled registry
        output_path: ROOT file to create (overwritten if present)

    Returns:
        Paths of all files written, ROOT file first
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    written = [str(output_path)]
    sparse = []
    with uproot.recreate(output_path) as root_file:
        for name, histogram in registry.items():
            if isinstance(histogram, SparseHistogram):
                sparse.append((name, histogram))
                continue
            root_file[name] = histogram

    for name, histogram in sparse:
        path = write_sparse(histogram, sparse_output_path(output_path, name))
        logger.info(f"Wrote {name} ({histogram.bin_count()} populated bins) to {path}")
        written.append(str(path))

    logger.info(f"Wrote {len(registry.names) - len(sparse)} histograms to {output_path}")
    return written
