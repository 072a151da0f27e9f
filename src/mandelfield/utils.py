# -*- coding: utf-8 -*-
import os
import errno
import contextlib

import mandelfield.settings as mfsettings


def mkdir_p(path):
    """ Creates directory ; if exists does nothing """
    try:
        os.makedirs(path)
    except OSError as exc:
        if exc.errno == errno.EEXIST and os.path.isdir(path):
            pass
        else:
            raise exc


@contextlib.contextmanager
def temporary_settings(**kwargs):
    """
    Context manager overriding attributes of `mandelfield.settings` for the
    duration of the block. The previous values are restored on exit, even if
    an exception is raised.

    Usage:
    ------
    with temporary_settings(enable_multithreading=False, chunk_size=4):
        view = mandelfield.compute(...)
    """
    for key in kwargs:
        if not hasattr(mfsettings, key):
            raise ValueError(f"Unknown setting: {key}")
    old_vals = {key: getattr(mfsettings, key) for key in kwargs}
    try:
        for key, val in kwargs.items():
            setattr(mfsettings, key, val)
        yield
    finally:
        for key, val in old_vals.items():
            setattr(mfsettings, key, val)
