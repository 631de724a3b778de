from .edges import (
    Edges,
    ExplicitEdges,
    UniformEdges,
    as_edges,
    histrange,
    is_uniform,
    sturges,
)
from .hist1d import Hist1D
from .hist2d import Hist2D
from .config import axis_from_config, hist_from_config, load_config

__all__ = [name for name in dir() if not name.startswith("_")]
