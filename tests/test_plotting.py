# -*- coding: utf-8 -*-
import os
import threading
import unittest

import numpy as np
import PIL.Image

import mandelfield as mf
import mandelfield.settings as mfsettings
import mandelfield.plotting as mfplotting
import mandelfield.utils as mfutils
import test_config


class Test_transform(unittest.TestCase):

    def test_transform_enum(self):
        self.assertEqual(
            set(mf.TRANSFORM_ENUM.__members__), {"none", "inverse", "log"}
        )
        for name in ("none", "inverse", "log"):
            with self.subTest(name=name):
                self.assertIs(mfplotting.transform_from(name),
                              mf.TRANSFORM_ENUM[name])
                self.assertIs(
                    mfplotting.transform_from(mf.TRANSFORM_ENUM[name]),
                    mf.TRANSFORM_ENUM[name]
                )

    def test_unrecognized(self):
        for transform in ("sqrt", "Log", "", None, 1):
            with self.subTest(transform=transform):
                with self.assertRaises(mf.UnrecognizedTransform):
                    mf.apply_transform(np.ones((2, 2)), transform)

    def test_apply_transform(self):
        z = np.array([[1., 2.], [0., 4.]])
        z_ref = z.copy()

        res = mf.apply_transform(z, "none")
        np.testing.assert_array_equal(res, z)
        self.assertFalse(res is z)

        res = mf.apply_transform(z, "inverse")
        np.testing.assert_array_equal(res, [[1., 0.5], [np.inf, 0.25]])

        res = mf.apply_transform(z, mf.TRANSFORM_ENUM.log)
        np.testing.assert_allclose(res, [[0., np.log(2.)],
                                         [-np.inf, np.log(4.)]])
        np.testing.assert_array_equal(z, z_ref)

    def test_view_not_modified(self):
        view = mf.compute(xlim=(-2., 0.5), ylim=(-1., 1.), nx=8, ny=6,
                          max_iter=20)
        z_ref = np.array(view.z)
        logz = mf.apply_transform(view.z, "log")
        self.assertTrue(logz.flags.writeable)
        np.testing.assert_array_equal(view.z, z_ref)


class Test_render_context(unittest.TestCase):

    def test_restored_on_exit(self):
        before = dict(mfsettings.render_defaults)
        with mf.render_context(margin=7, axes=True) as params:
            self.assertEqual(params["margin"], 7)
            self.assertTrue(params["axes"])
            self.assertEqual(params["background"], before["background"])
            self.assertEqual(mf.render_params(), params)
            # The global defaults are left untouched
            self.assertEqual(mfsettings.render_defaults, before)
        self.assertEqual(mf.render_params(), before)

    def test_nested(self):
        before = dict(mfsettings.render_defaults)
        with mf.render_context(margin=7):
            with mf.render_context(axes=True) as params:
                self.assertEqual(params["margin"], 7)
                self.assertTrue(params["axes"])
            self.assertFalse(mf.render_params()["axes"])
            self.assertEqual(mf.render_params()["margin"], 7)
        self.assertEqual(mf.render_params(), before)

    def test_restored_on_failure(self):
        before = dict(mfsettings.render_defaults)
        with self.assertRaises(RuntimeError):
            with mf.render_context(margin=7):
                raise RuntimeError("failure during rendering")
        self.assertEqual(mfsettings.render_defaults, before)
        self.assertEqual(mf.render_params(), before)

    def test_unknown_option(self):
        before = dict(mfsettings.render_defaults)
        with self.assertRaises(ValueError):
            with mf.render_context(margin=3, colour="red"):
                pass
        self.assertEqual(mf.render_params(), before)

    def test_interleaved_threads(self):
        # A enters, B enters, A exits, B exits
        before = dict(mfsettings.render_defaults)
        a_entered = threading.Event()
        b_entered = threading.Event()
        a_exited = threading.Event()
        seen = {}
        errors = []

        def thread_a():
            try:
                with mf.render_context(margin=5) as params:
                    seen["a"] = params
                    a_entered.set()
                    b_entered.wait(10)
                a_exited.set()
            except Exception as exc:
                errors.append(exc)
                a_entered.set()
                a_exited.set()

        def thread_b():
            try:
                a_entered.wait(10)
                with mf.render_context(axes=True) as params:
                    seen["b"] = params
                    b_entered.set()
                    a_exited.wait(10)
                    seen["b_after_a"] = mf.render_params()
            except Exception as exc:
                errors.append(exc)
                b_entered.set()

        threads = [threading.Thread(target=thread_a),
                   threading.Thread(target=thread_b)]
        for th in threads:
            th.start()
        for th in threads:
            th.join(20)

        self.assertEqual(errors, [])
        self.assertEqual(seen["a"], dict(before, margin=5))
        self.assertEqual(seen["b"], dict(before, axes=True))
        self.assertEqual(seen["b_after_a"], dict(before, axes=True))
        self.assertEqual(mfsettings.render_defaults, before)
        self.assertEqual(mf.render_params(), before)

    def test_plot_reads_enclosing_context(self):
        view = mf.compute(xlim=(-2., 0.5), ylim=(-1.25, 1.25), nx=6, ny=4,
                          max_iter=10)
        with mf.render_context(margin=3):
            im = mf.plot(view)
            self.assertEqual(im.size, (6 + 6, 4 + 6))
            # call options take precedence
            im = mf.plot(view, margin=0)
            self.assertEqual(im.size, (6, 4))


class Test_plot(unittest.TestCase):

    def setUp(self):
        plot_dir = os.path.join(test_config.temporary_data_dir, "_plot_dir")
        mfutils.mkdir_p(plot_dir)
        self.plot_dir = plot_dir

        self.view = mf.compute(xlim=(-2., 0.5), ylim=(-1.25, 1.25), nx=30,
                               ny=20, max_iter=30)

    def test_default_plot(self):
        for transform in ("none", "inverse", "log"):
            with self.subTest(transform=transform):
                im = mf.plot(self.view, transform=transform)
                self.assertEqual(im.mode, "RGB")
                self.assertEqual(im.size, (32, 22))

    def test_unrecognized_transform(self):
        with self.assertRaises(mf.UnrecognizedTransform):
            mf.plot(self.view, transform="sqrt")

    def test_orientation(self):
        # x to the right, y upward
        view = mf.MandelbrotView(
            x=np.array([0., 1., 2.]), y=np.array([0., 1.]),
            z=np.array([[0., 5.], [1., 5.], [2., 5.]]), max_iter=5
        )
        col = ["#000000", "#FF0000", "#00FF00", "#0000FF"]
        im = mf.plot(view, col=col, margin=0)
        self.assertEqual(im.size, (3, 2))
        # top row: y = 1, value 5 -> last color
        for ix in range(3):
            self.assertEqual(im.getpixel((ix, 0)), (0, 0, 255))
        # bottom row: y = 0, values 0, 1, 2 -> bins 0, 0, 1
        self.assertEqual(im.getpixel((0, 1)), (0, 0, 0))
        self.assertEqual(im.getpixel((1, 1)), (0, 0, 0))
        self.assertEqual(im.getpixel((2, 1)), (255, 0, 0))

    def test_in_set_color(self):
        # The sentinel is the maximum value: mapped to the last color
        col = mf.mandelbrot_palette(["#000000", "#FFFFFF"], in_set="#FF0000")
        view = mf.compute(xlim=(-0.5, 0.5), ylim=(-0.5, 0.5), nx=3, ny=3,
                          max_iter=100)
        im = mf.plot(view, col=col, margin=0)
        self.assertEqual(im.getpixel((1, 1)), (255, 0, 0))

    def test_non_finite_background(self):
        view = mf.MandelbrotView(
            x=np.array([0., 1.]), y=np.array([0., 1.]),
            z=np.array([[0., 1.], [1., 1.]]), max_iter=5
        )
        im = mf.plot(view, col=["#FF0000", "#00FF00"], transform="log",
                     margin=0, background="white")
        # log(0) = -inf at (x0, y0): bottom-left pixel
        self.assertEqual(im.getpixel((0, 1)), (255, 255, 255))
        self.assertEqual(im.getpixel((0, 0)), (255, 0, 0))
        self.assertEqual(im.getpixel((1, 1)), (255, 0, 0))

    def test_margin_and_axes(self):
        before = dict(mfsettings.render_defaults)
        im = mf.plot(self.view, margin=5, background="blue")
        self.assertEqual(im.size, (40, 30))
        self.assertEqual(im.getpixel((0, 0)), (0, 0, 255))

        im = mf.plot(self.view, axes=True)
        m = mfplotting.AXES_MARGIN
        self.assertEqual(im.size, (30 + 2 * m, 20 + 2 * m))
        self.assertEqual(im.getpixel((m - 1, m - 1)), (0, 0, 0))
        self.assertEqual(mfsettings.render_defaults, before)

    def test_settings_restored_on_failure(self):
        before = dict(mfsettings.render_defaults)
        with self.assertRaises(ValueError):
            mf.plot(self.view, col=["white", "not_a_color"], margin=9)
        self.assertEqual(mfsettings.render_defaults, before)

    def test_save_png(self):
        im = mf.plot(self.view)
        img_path = os.path.join(self.plot_dir, "sub", "view.png")
        with test_config.suppress_stdout():
            mfplotting.save_png(im, img_path, self.view)
        self.assertTrue(os.path.isfile(img_path))
        with PIL.Image.open(img_path) as reloaded:
            self.assertEqual(reloaded.size, im.size)
            self.assertEqual(reloaded.text["max_iter"], "30")
            self.assertEqual(reloaded.text["shape"], "(30, 20)")


if __name__ == "__main__":
    full_test = True
    runner = unittest.TextTestRunner(verbosity=2)
    if full_test:
        runner.run(test_config.suite([
            Test_transform,
            Test_render_context,
            Test_plot,
        ]))
    else:
        suite = unittest.TestSuite()
        suite.addTest(Test_plot("test_orientation"))
        runner.run(suite)
