# -*- coding: utf-8 -*-
import os
import enum
import logging
import textwrap
import contextlib
import contextvars

import numpy as np
import PIL.Image
import PIL.ImageDraw
import PIL.PngImagePlugin

import mandelfield.settings as mfsettings
import mandelfield.utils as mfutils
from mandelfield.colors import Color_tools, grey_colors, mandelbrot_palette
from mandelfield.errors import UnrecognizedTransform


logger = logging.getLogger(__name__)

TRANSFORM_ENUM = enum.Enum(
    "TRANSFORM_ENUM",
    ("none", "inverse", "log"),
    module=__name__
)

AXES_MARGIN = 40 # minimal margin in pixels when axes are drawn
AXES_COLOR = (0, 0, 0)


def transform_from(transform):
    """ Return the TRANSFORM_ENUM member for transform (member or name) """
    if isinstance(transform, TRANSFORM_ENUM):
        return transform
    if isinstance(transform, str) and (
            transform in TRANSFORM_ENUM.__members__):
        return TRANSFORM_ENUM[transform]
    raise UnrecognizedTransform(f"transform not recognised: {transform!r}")


def apply_transform(z, transform="none"):
    """
    Return a transformed copy of the field z, the input is left untouched.

    Parameters
    ----------
    z : array-like
        The escape-time field
    transform : "none" | "inverse" | "log" or a TRANSFORM_ENUM member
        - "none": z
        - "inverse": 1 / z (0 -> inf)
        - "log": log(z) (0 -> -inf)
    """
    kind = transform_from(transform)
    z = np.asarray(z, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        if kind is TRANSFORM_ENUM.none:
            return np.copy(z)
        elif kind is TRANSFORM_ENUM.inverse:
            return 1. / z
        else:
            return np.log(z)


def default_palette():
    return mandelbrot_palette(["white"] + grey_colors(50))


# Per-context overrides of settings.render_defaults, stacked by render_context
_render_overrides = contextvars.ContextVar("render_overrides", default={})


def render_params():
    """ The drawing configuration in effect: `settings.render_defaults`
    updated by the overrides of the enclosing `render_context` blocks """
    return dict(mfsettings.render_defaults, **_render_overrides.get())


@contextlib.contextmanager
def render_context(**overrides):
    """
    Scope guard for the drawing configuration.

    Applies `overrides` on top of the configuration in effect and yields the
    resulting parameters dict. The overrides live in a context variable:
    `settings.render_defaults` itself is never modified, and other threads
    do not see them. The previous configuration is back on exit, including
    when an exception is raised inside the block.
    """
    unknown = set(overrides) - set(mfsettings.render_defaults)
    if unknown:
        raise ValueError(f"Unknown render options: {sorted(unknown)}")
    token = _render_overrides.set(dict(_render_overrides.get(), **overrides))
    try:
        yield render_params()
    finally:
        _render_overrides.reset(token)


def color_indices(values, n_colors):
    """
    Maps values to color indices: the finite values range is split in
    n_colors bins of equal width.

    Returns
    -------
    indices : int array, same shape as values (0 for non-finite values)
    finite : boolean array, True where values is finite
    """
    finite = np.isfinite(values)
    indices = np.zeros(values.shape, dtype=np.int64)
    if not np.any(finite):
        return indices, finite
    finite_vals = values[finite]
    vmin = np.min(finite_vals)
    vmax = np.max(finite_vals)
    if vmax > vmin:
        scaled = (finite_vals - vmin) / (vmax - vmin) * n_colors
        indices[finite] = np.minimum(scaled.astype(np.int64), n_colors - 1)
    return indices, finite


def field_image(z, col):
    """
    RGBA image of a field of shape (nx, ny): x to the right, y upward.
    Non-finite values are transparent.
    """
    rgb = Color_tools.to_uint8(col)
    if rgb.shape[0] == 0:
        raise ValueError("Empty color sequence")
    indices, finite = color_indices(z, rgb.shape[0])

    (nx, ny) = z.shape
    rgba = np.empty((nx, ny, 4), dtype=np.uint8)
    rgba[:, :, :3] = rgb[indices]
    rgba[:, :, 3] = np.where(finite, 255, 0)
    # Image row 0 is the top i.e. the last y
    arr = np.ascontiguousarray(np.swapaxes(rgba, 0, 1)[::-1, :, :])
    return PIL.Image.fromarray(arr)


def draw_axes(im, view, margin):
    """ Draws a frame around the field and labels the axes ranges """
    (nx, ny) = view.shape
    draw = PIL.ImageDraw.Draw(im)
    draw.rectangle(
        [margin - 1, margin - 1, margin + nx, margin + ny],
        outline=AXES_COLOR
    )
    (x0, x1), (y0, y1) = view.xlim, view.ylim
    draw.text((margin, margin + ny + 4), f"{x0:.4g}", fill=AXES_COLOR)
    x1_str = f"{x1:.4g}"
    draw.text(
        (margin + nx - draw.textlength(x1_str), margin + ny + 4),
        x1_str, fill=AXES_COLOR
    )
    draw.text((2, margin), f"{y1:.4g}", fill=AXES_COLOR)
    draw.text((2, margin + ny - 10), f"{y0:.4g}", fill=AXES_COLOR)


def plot(view, col=None, transform="none", **options):
    """
    Renders a Mandelbrot field as an image.

    Parameters
    ----------
    view : MandelbrotView
        The field to render (not modified)
    col : sequence of colors
        Defaults to `mandelbrot_palette(["white"] + grey_colors(50))`. The
        finite range of the transformed field is split in len(col) bins.
    transform : "none" | "inverse" | "log" or a TRANSFORM_ENUM member
        Pointwise transform applied to a copy of `view.z` before rendering
    options :
        Overrides of `settings.render_defaults` for this call: `margin`
        (pixels), `axes` (bool), `background` (color)

    Returns
    -------
    im : PIL.Image.Image, RGB mode

    Raises
    ------
    UnrecognizedTransform
        If `transform` is not in TRANSFORM_ENUM
    """
    kind = transform_from(transform)
    if col is None:
        col = default_palette()

    with render_context(**options) as params:
        margin = int(params["margin"])
        if params["axes"]:
            margin = max(margin, AXES_MARGIN)
        if margin < 0:
            raise ValueError(f"margin shall be >= 0, given: {margin}")

        z = apply_transform(view.z, kind)
        field_im = field_image(z, col)

        (nx, ny) = view.shape
        im = PIL.Image.new(
            "RGBA", (nx + 2 * margin, ny + 2 * margin), params["background"]
        )
        im.alpha_composite(field_im, (margin, margin))
        im = im.convert("RGB")

        if params["axes"]:
            draw_axes(im, view, margin)

    logger.debug(
        f"Rendered field of shape {view.shape} with transform {kind.name}, "
        f"{len(col)} colors, image size {im.size}"
    )
    return im


def save_png(im, img_path, view):
    """
    Saves *im* to png format at *img_path*, tagging with the view parameters.
    """
    tag_dict = {
        "Software": "mandelfield",
        "xlim": view.xlim,
        "ylim": view.ylim,
        "shape": view.shape,
        "max_iter": view.max_iter,
        "smooth": view.smooth,
    }
    pnginfo = PIL.PngImagePlugin.PngInfo()
    for k, v in tag_dict.items():
        pnginfo.add_text(k, str(v))

    dirname = os.path.dirname(img_path)
    if dirname != "":
        mfutils.mkdir_p(dirname)
    im.save(img_path, format="png", pnginfo=pnginfo)

    logger.info(textwrap.dedent(f"""\
        Image of size {im.size} saved to:
          {img_path}"""
    ))
