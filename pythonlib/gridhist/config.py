from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from ._log import warn
from .edges import Edges, ExplicitEdges, UniformEdges
from .hist1d import Hist1D
from .hist2d import Hist2D

DEFAULT_OVERFLOW = False
DEFAULT_DTYPE = "float64"

_HIST_KEYS = {"x", "y", "overflow", "dtype"}
_AXIS_KEYS = {"edges", "start", "stop", "nbins"}


def axis_from_config(node: Any, name: str = "x") -> Edges:
    """
    Edges from a config node.

    Either ``{"edges": [...]}`` or ``{"start": a, "stop": b, "nbins": n}``;
    a bare list is taken as explicit edges.
    """
    if isinstance(node, (list, tuple)):
        return ExplicitEdges(node)
    if not isinstance(node, Mapping):
        raise ValueError(f"axis {name!r}: expected a mapping or a list, got {node!r}")

    for k in node:
        if k not in _AXIS_KEYS:
            warn(f"axis {name!r}: ignoring unknown key {k!r}")

    if "edges" in node:
        return ExplicitEdges(node["edges"])
    missing = [k for k in ("start", "stop", "nbins") if k not in node]
    if missing:
        raise ValueError(f"axis {name!r}: missing {', '.join(missing)}")
    return UniformEdges(node["start"], node["stop"], int(node["nbins"]))


def hist_from_config(cfg: Mapping[str, Any]) -> Hist1D | Hist2D:
    """Empty Hist1D (only ``x`` given) or Hist2D (``x`` and ``y``) from a mapping."""
    if "x" not in cfg:
        raise ValueError("histogram config needs at least an 'x' axis")
    for k in cfg:
        if k not in _HIST_KEYS:
            warn(f"ignoring unknown histogram key {k!r}")

    overflow = bool(cfg.get("overflow", DEFAULT_OVERFLOW))
    dtype = cfg.get("dtype", DEFAULT_DTYPE)
    ex = axis_from_config(cfg["x"], "x")
    if "y" not in cfg:
        return Hist1D(ex, dtype=dtype, overflow=overflow)
    ey = axis_from_config(cfg["y"], "y")
    return Hist2D(ex, ey, dtype=dtype, overflow=overflow)


def load_config(path) -> Dict[str, Hist1D | Hist2D]:
    """
    Read a YAML file of histogram definitions.

    The file holds a ``histograms:`` mapping of name -> histogram config,
    or a single histogram config, returned under the file's stem.
    """
    path = Path(path)
    with path.open("r") as f:
        cfg = yaml.safe_load(f)
    if not isinstance(cfg, Mapping):
        raise ValueError(f"{path}: expected a mapping at top level")

    if "histograms" in cfg:
        hists = cfg["histograms"]
        if not isinstance(hists, Mapping):
            raise ValueError(f"{path}: 'histograms' must be a mapping")
        return {name: hist_from_config(h) for name, h in hists.items()}
    return {path.stem: hist_from_config(cfg)}
