# -*- coding: utf-8 -*-
__license__ = "MIT"
__version__ = "0.1.0"

from . import settings
from .errors import (
    Mandelfield_error,
    InvalidRegion,
    InvalidResolution,
    InvalidIterationBudget,
    UnrecognizedTransform,
    ComputationInterrupted
)
from .core import MandelbrotView, Field_computer, compute
from .colors import mandelbrot_palette, grey_colors
from .plotting import (
    TRANSFORM_ENUM, apply_transform, plot, render_context, render_params
)
from .export import summary, print_view, to_dataframe, from_dataframe
from .log import set_log_handlers
