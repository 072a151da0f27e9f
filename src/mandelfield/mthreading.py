# -*- coding: utf-8 -*-
import os
import functools
import concurrent.futures

import mandelfield.settings as mfsettings


class Multithreading_iterator():
    def __init__(self, iterable_attr, iter_kwargs="key", parallel_attr=None,
                 veto_parallel=False):
        """
Decorator class for multithreading looping of an instance-method.

Parameters:
-----------
iterable_attr : string
    getattr(instance, iterable_attr) is a Generator function (i.e.
    `yields` the successive values).
iter_kwargs : string
    name of the wrapped method keyword-argument which will be filled with
    successive values yielded by the generator function pointed to by
    iterable_attr
parallel_attr : string or None
    if not None, getattr(instance, parallel_attr) is a boolean ; when False
    the loop is run without multi-threading for this instance
veto_parallel : bool
    if True, defaults to normal iteration without multi-threading

Usage:
------
@Multithreading_iterator(iterable_attr, iter_kwargs)
def method(self, *args, iter_kwarg=None, **otherkwargs):
    (... CPU-intensive calculations releasing the GIL ...)
    return None

Exceptions raised by the method are propagated to the caller.
"""
        self.iterable_attr = iterable_attr
        self.iter_kwargs = iter_kwargs
        self.parallel_attr = parallel_attr
        self.veto_parallel = veto_parallel

    def __call__(self, method):
        @functools.wraps(method)
        def wrapper(instance, *args, **kwargs):
            parallel = (
                mfsettings.enable_multithreading and not self.veto_parallel
            )
            if parallel and (self.parallel_attr is not None):
                parallel = bool(getattr(instance, self.parallel_attr))
            if parallel:
                self.call_multi_thread(instance, method, *args, **kwargs)
            else:
                self.call_std(instance, method, *args, **kwargs)
        return wrapper

    @staticmethod
    def max_workers():
        if mfsettings.max_workers is None:
            return os.cpu_count()
        return mfsettings.max_workers

    def call_multi_thread(self, instance, method, *args, **kwargs):
        """ Parallel (multi-threading) loop """
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self.max_workers()
        ) as threadpool:
            full_args = (instance,) + args
            def get_kwargs(key):
                kwargs[self.iter_kwargs] = key
                return kwargs

            futures = [
                threadpool.submit(
                    method,
                    *full_args,
                    **get_kwargs(key)
                )
                for key in getattr(instance, self.iterable_attr)()
            ]
            for fut in concurrent.futures.as_completed(futures):
                fut.result()

    def call_std(self, instance, method, *args, **kwargs):
        """ Standard loop """
        for key in getattr(instance, self.iterable_attr)():
            kwargs[self.iter_kwargs] = key
            full_args = (instance,) + args
            method(*full_args, **kwargs)
