# -*- coding: utf-8 -*-
import math
import numbers
import dataclasses
import logging
import textwrap
import threading
import time

import numpy as np
import numba

import mandelfield.settings as mfsettings
from mandelfield.errors import (
    InvalidRegion,
    InvalidResolution,
    InvalidIterationBudget,
    ComputationInterrupted
)
from mandelfield.mthreading import Multithreading_iterator


logger = logging.getLogger(__name__)

BREAKOUT_R2 = 4.       # squared escape radius, |z| > 2
USER_INTERRUPTED = 1   # return code for a user-interrupted computation


@dataclasses.dataclass(frozen=True, eq=False)
class MandelbrotView:
    """
    The output of a field computation.

    Attributes
    ----------
    x : float64 array of shape (nx,)
        The sampled real parts
    y : float64 array of shape (ny,)
        The sampled imaginary parts
    z : float64 array of shape (nx, ny)
        z[i, j] is the escape iteration count of c = x[i] + 1j * y[j], or
        `max_iter` if the orbit did not escape (point in the set)
    max_iter : int
        The iteration budget used
    smooth : bool
        True if the escape counts carry the fractional correction

    The arrays are copied and frozen (`writeable` flag off) at construction:
    consumers shall work on copies.
    """
    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    max_iter: int
    smooth: bool = False

    def __post_init__(self):
        for name in ("x", "y", "z"):
            # own copy: the caller arrays stay writeable and detached
            arr = np.array(getattr(self, name), dtype=np.float64, copy=True)
            arr.flags.writeable = False
            object.__setattr__(self, name, arr)
        if (self.x.ndim != 1) or (self.y.ndim != 1):
            raise ValueError("x and y shall be 1d arrays")
        if self.z.shape != (self.x.size, self.y.size):
            raise ValueError(
                f"z of shape {self.z.shape} does not match axes "
                f"({self.x.size}, {self.y.size})"
            )

    @property
    def shape(self):
        return self.z.shape

    @property
    def xlim(self):
        return (float(self.x[0]), float(self.x[-1]))

    @property
    def ylim(self):
        return (float(self.y[0]), float(self.y[-1]))

    @property
    def in_set(self):
        """ Boolean mask of the points which did not escape """
        return self.z == self.max_iter


def check_interval(name, lim):
    """ Return lim as a (float, float) tuple or raise InvalidRegion """
    try:
        lo, hi = lim
        lo, hi = float(lo), float(hi)
    except (TypeError, ValueError):
        raise InvalidRegion(
            f"{name} shall be a pair of reals, given: {lim!r}"
        ) from None
    if not(math.isfinite(lo) and math.isfinite(hi)):
        raise InvalidRegion(f"{name} bounds shall be finite, given: {lim!r}")
    if not(lo < hi):
        raise InvalidRegion(
            f"{name} shall be strictly increasing, given: {lim!r}"
        )
    return (lo, hi)


def check_count(name, val, exc_class):
    """ Return val as int if a positive integer, otherwise raise exc_class """
    if isinstance(val, bool) or not isinstance(val, numbers.Integral):
        raise exc_class(f"{name} shall be an integer, given: {val!r}")
    if val < 1:
        raise exc_class(f"{name} shall be >= 1, given: {val!r}")
    return int(val)


def grid_size(xlim, ylim, nx=None, ny=None, resolution=None):
    """
    Return the (nx, ny) grid size.

    Either nx and ny are given, or both are derived from `resolution`: nx is
    the resolution and ny follows the aspect ratio of the region. xlim and ylim
    shall have been validated.
    """
    if (nx is None) and (ny is None):
        if resolution is None:
            resolution = mfsettings.default_resolution
        nx = check_count("resolution", resolution, InvalidResolution)
        xy_ratio = (xlim[1] - xlim[0]) / (ylim[1] - ylim[0])
        ny = max(1, int(nx / xy_ratio + 0.5))
        return (nx, ny)

    if (nx is None) or (ny is None):
        raise InvalidResolution(
            f"nx and ny shall be given together, given: nx={nx!r}, ny={ny!r}"
        )
    if resolution is not None:
        raise InvalidResolution("Give either resolution or (nx, ny), not both")
    return (
        check_count("nx", nx, InvalidResolution),
        check_count("ny", ny, InvalidResolution)
    )


def axis_vector(lim, n):
    """ n evenly spaced values over the closed interval lim ;
    [lim[0]] if n == 1 """
    return np.linspace(lim[0], lim[1], n, dtype=np.float64)


class Field_computer:
    def __init__(self, xlim, ylim, nx=None, ny=None, max_iter=50,
                 smooth=False, resolution=None):
        """
Escape-time field computation for the Mandelbrot set z <- z**2 + c.

The field rows are computed by blocks of `mandelfield.settings.chunk_size`
rows. Blocks are disjoint so they can be dispatched to a pool of threads ;
the inner loop is a numba kernel which releases the GIL.

Parameters
----------
xlim : (float, float)
    Real-axis interval, strictly increasing
ylim : (float, float)
    Imaginary-axis interval, strictly increasing
nx, ny : int
    Number of samples along x and y. If both are None, they are derived
    from `resolution`
max_iter : int
    The iteration budget ; non-escaping points get this value
smooth : bool
    If True, escaped points get the fractional count k - log2(log2(|z|))
resolution : int
    Number of samples along x when nx and ny are not given, ny following
    the region aspect ratio. Defaults to
    `mandelfield.settings.default_resolution`

All arguments are validated here, before any allocation.
"""
        self.xlim = check_interval("xlim", xlim)
        self.ylim = check_interval("ylim", ylim)
        self.nx, self.ny = grid_size(
            self.xlim, self.ylim, nx, ny, resolution
        )
        self.max_iter = check_count(
            "max_iter", max_iter, InvalidIterationBudget
        )
        self.smooth = bool(smooth)

        self._interrupted = np.array([0], dtype=np.bool_)
        self._status_lock = threading.Lock()

    @property
    def parallel(self):
        """ Small grids are run in the calling thread """
        return (self.nx * self.ny) >= mfsettings.parallel_min_points

    # Interruption ============================================================
    def raise_interruption(self):
        """ Cancels the computation ; the row blocks not yet started will be
        skipped and `run` raises `ComputationInterrupted` """
        self._interrupted[0] = True

    def lower_interruption(self):
        self._interrupted[0] = False

    def is_interrupted(self):
        return bool(self._interrupted[0])

    # Row blocks ==============================================================
    def row_blocks(self):
        """
        Generator function
        Yields the row blocks spans (ix, ixx)
        """
        chunk_size = mfsettings.chunk_size
        for ix in range(0, self.nx, chunk_size):
            yield (ix, min(ix + chunk_size, self.nx))

    @property
    def blocks_count(self):
        (cx, r) = divmod(self.nx, mfsettings.chunk_size)
        if r != 0:
            cx += 1
        return cx

    def params_info_str(self):
        return textwrap.dedent(f"""\
            Mandelbrot field computation:
              xlim: {self.xlim}, ylim: {self.ylim}
              grid: {self.nx} x {self.ny}, max_iter: {self.max_iter}
              smooth: {self.smooth}, parallel: {self.parallel}""")

    def run(self):
        """
        Computes the field

        Returns
        -------
        view : MandelbrotView
        """
        logger.info(self.params_info_str())
        t0 = time.time()

        self.x = axis_vector(self.xlim, self.nx)
        self.y = axis_vector(self.ylim, self.ny)
        self._field = np.empty((self.nx, self.ny), dtype=np.float64)
        self._status = {"val": 0, "last_log": 0.}

        self.compute_block()

        # A late interruption does not discard a complete field
        if self.is_interrupted() and (
                self._status["val"] < self.blocks_count):
            logger.warning("Interruption signal received")
            del self._field
            raise ComputationInterrupted(
                f"Computation interrupted after {self._status['val']} / "
                f"{self.blocks_count} row blocks"
            )

        logger.info(f"Field computed in {time.time() - t0:.3f} s")
        view = MandelbrotView(
            x=self.x, y=self.y, z=self._field,
            max_iter=self.max_iter, smooth=self.smooth
        )
        del self._field
        return view

    @Multithreading_iterator(
        iterable_attr="row_blocks", iter_kwargs="row_block",
        parallel_attr="parallel"
    )
    def compute_block(self, row_block=None):
        """ Fills the rows ix to ixx - 1 of the field """
        if self.is_interrupted():
            return
        (ix, ixx) = row_block
        ret_code = numba_escape_block(
            self.x, self.y, ix, ixx, self.max_iter, self.smooth,
            self._field, self._interrupted
        )
        if ret_code == USER_INTERRUPTED:
            return
        self.incr_blocks_status()

    def incr_blocks_status(self):
        """ Increase by 1 the number of computed blocks, logging the progress
        at most once per second """
        with self._status_lock:
            curr_val = self._status["val"] + 1
            self._status["val"] = curr_val
            nblocks = self.blocks_count

            curr_time = time.time()
            time_diff = curr_time - self._status["last_log"]
            bool_log = (
                (time_diff > 1) or (curr_val == 1) or (curr_val == nblocks)
            )
            if bool_log:
                self._status["last_log"] = curr_time
                logger.debug(f"Row blocks: {curr_val} / {nblocks}")


def compute(xlim=(-2., 2.), ylim=(-2., 2.), nx=None, ny=None, max_iter=50,
            smooth=False, *, resolution=None):
    """
    Computes the escape-time field of the Mandelbrot set over a rectangular
    region of the complex plane.

    Parameters
    ----------
    xlim, ylim : (float, float)
        The sampled region, strictly increasing intervals
    nx, ny : int
        Grid size ; if omitted, derived from `resolution`
    max_iter : int
        The iteration budget
    smooth : bool
        Apply the fractional escape-count correction (extension, off by
        default: raw integer counts)
    resolution : int
        Keyword-only, see `Field_computer`

    Returns
    -------
    view : MandelbrotView

    Raises
    ------
    InvalidRegion, InvalidResolution, InvalidIterationBudget
        On invalid parameters, before any computation
    """
    return Field_computer(
        xlim, ylim, nx=nx, ny=ny, max_iter=max_iter, smooth=smooth,
        resolution=resolution
    ).run()


@numba.njit(nogil=True)
def smooth_count(k, z_real, z_imag):
    """ k - log2(log2(|z|)), the correction being kept within [0, 1] """
    abs_z = math.sqrt(z_real * z_real + z_imag * z_imag)
    nu = math.log2(math.log2(abs_z))
    if nu < 0.:
        nu = 0.
    elif nu > 1.:
        nu = 1.
    val = k - nu
    if val < 0.:
        val = 0.
    return val


@numba.njit(nogil=True)
def numba_escape_block(x, y, ix, ixx, max_iter, smooth, field, _interrupted):
    # Escape-time iterations for the rows ix to ixx - 1
    ny = y.shape[0]

    for i in range(ix, ixx):
        c_real = x[i]
        for j in range(ny):
            c_imag = y[j]
            z_real = 0.
            z_imag = 0.
            escaped = False
            k = 0
            while k < max_iter:
                temp = z_real
                z_real = z_real * z_real - z_imag * z_imag + c_real
                z_imag = 2. * temp * z_imag + c_imag
                if z_real * z_real + z_imag * z_imag > BREAKOUT_R2:
                    escaped = True
                    break
                k += 1

            if not escaped:
                field[i, j] = max_iter
            elif smooth:
                field[i, j] = smooth_count(k, z_real, z_imag)
            else:
                field[i, j] = k

        if _interrupted[0]:
            return USER_INTERRUPTED

    return 0
