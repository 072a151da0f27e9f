# -*- coding: utf-8 -*-
"""
General settings at application-level
"""

enable_multithreading: bool = True
"""Turn on or off multithreading (for debugging purpose)"""

max_workers: int = None
"""Number of worker threads used for the row blocks. `None` defaults to
`os.cpu_count()`"""

chunk_size: int = 16
"""Number of field rows (successive x-values) computed by one task of the
worker pool"""

parallel_min_points: int = 10000
"""Grids with fewer points than this are always computed sequentially, the
thread pool overhead being larger than the work itself"""

default_resolution: int = 600
"""Number of samples along the x-axis when neither `nx`, `ny` nor
`resolution` is given to `mandelfield.compute`"""

verbosity: int = 2
"""
Default verbosity of `mandelfield.set_log_handlers`, the index of an entry
of `mandelfield.log.verbosity_list`:

    - 0: WARNING & higher severity, output to stderr
    - 1: INFO & higher severity, output to stdout
    - 2 (default):

        - INFO & higher severity, output to stdout
        - DEBUG & higher severity, output to a log file

    - 3 (highest verbosity):

        - INFO & higher severity, output to stdout
        - ALL message (incl. NOTSET), output to a log file

Note: Severities in descending order:
CRITICAL, ERROR, WARNING, INFO, DEBUG, NOTSET """

log_directory: str = None
""" The logging directory for this session - as str"""

# render_defaults : drawing configuration read by `mandelfield.plotting.plot`
# Per-call overrides go through `mandelfield.plotting.render_context`, which
# leaves this dict untouched
render_defaults = {
    "margin": 1,
    "axes": False,
    "background": "white",
}
