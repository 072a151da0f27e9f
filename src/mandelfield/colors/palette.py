# -*- coding: utf-8 -*-
import numpy as np
import PIL.ImageColor


RAMP_NPTS = 50 # palettes shorter than this are interpolated to this length


class Color_tools():
    """ A bunch of staticmethods
    All rgb arrays are float arrays of shape [n, 3] with values in [0, 255]"""

    @staticmethod
    def to_rgb(colors):
        """
        Parses a sequence of colors to a float rgb array of shape [n, 3]

        *colors* items are hex strings ("#RRGGBB"), color names understood
        by Pillow ("white") or rgb tuples of ints in [0, 255]
        """
        rgb = []
        for color in colors:
            if isinstance(color, str):
                # Raises ValueError for unknown specifiers
                color = PIL.ImageColor.getrgb(color)[:3]
            color = tuple(color)
            if len(color) not in (3, 4):
                raise ValueError(f"Expected a rgb triplet, given: {color!r}")
            rgb.append(color[:3])
        return np.array(rgb, dtype=np.float64).reshape(-1, 3)

    @staticmethod
    def to_uint8(colors):
        """ Idem to_rgb, returns an uint8 array """
        rgb = np.round(Color_tools.to_rgb(colors))
        return np.clip(rgb, 0., 255.).astype(np.uint8)

    @staticmethod
    def to_hex(rgb):
        """ rgb array [n, 3] -> list of "#RRGGBB" strings """
        rgb = np.clip(np.round(rgb), 0., 255.).astype(np.int64)
        return ["#{:02X}{:02X}{:02X}".format(*row) for row in rgb]

    @staticmethod
    def ramp(rgb, n):
        """
        Return a color gradient of n colors passing through the colors of rgb,
        linear in rgb space. The input colors are evenly spaced along the
        gradient, first and last ones being kept.
        """
        npts = rgb.shape[0]
        if npts == 1:
            return np.repeat(rgb, n, axis=0)
        stops = np.linspace(0., 1., npts)
        t = np.linspace(0., 1., n)
        return np.vstack([
            np.interp(t, stops, rgb[:, i]) for i in range(3)
        ]).T


def grey_colors(n, start=0.3, end=0.9, gamma=2.2):
    """
    Return a list of n gamma-corrected grey levels, from dark (start) to
    light (end), as "#RRGGBB" strings.
    """
    levels = np.linspace(start ** gamma, end ** gamma, n) ** (1. / gamma)
    rgb = np.repeat(255. * levels[:, np.newaxis], 3, axis=1)
    return Color_tools.to_hex(rgb)


def mandelbrot_palette(palette, folds=2, in_set="black"):
    """
    Generate a palette suitable for coloring a Mandelbrot field.

    Takes a simple palette, expands it to at least 50 colors and oscillates
    it, so that successive escape-time bands cycle through the colors.

    Parameters
    ----------
    palette : sequence of colors
        hex strings (e.g. "#FFFFFF"), Pillow color names or rgb tuples
    folds : int
        number of times to wrap or 'fold' the palette
    in_set : color
        color for areas in the Mandelbrot set (last entry, matching the
        `max_iter` sentinel)

    Returns
    -------
    colors : list of "#RRGGBB" strings, of length 2 * n * folds + 1 where
        n = max(50, len(palette))
    """
    if len(palette) == 0:
        raise ValueError("Empty palette")
    if folds < 1:
        raise ValueError(f"folds shall be >= 1, given: {folds}")

    rgb = Color_tools.to_rgb(palette)
    if rgb.shape[0] < RAMP_NPTS:
        rgb = Color_tools.ramp(rgb, RAMP_NPTS)
    colors = Color_tools.to_hex(rgb)

    in_set_color = Color_tools.to_hex(Color_tools.to_rgb([in_set]))[0]
    return (colors + colors[::-1]) * folds + [in_set_color]
