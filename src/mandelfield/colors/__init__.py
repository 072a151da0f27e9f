# -*- coding: utf-8 -*-
from .palette import (
    Color_tools,
    grey_colors,
    mandelbrot_palette
)
