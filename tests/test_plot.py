import os
import tempfile
from unittest import TestCase

from bdpflow.output import SampleRow
from bdpflow.plot import plot_samples

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class PlotSamplesTest(TestCase):
    def test_plot(self):
        rows = [
            SampleRow(16000000, 500, 64240, 65160),
            SampleRow(12000000, 650, 64240, 65160),
            SampleRow(14500000, 560, 64240, 1024),
        ]
        with tempfile.TemporaryDirectory() as dirpath:
            path = os.path.join(dirpath, "samples.png")
            plot_samples(rows, path)

            with open(path, "rb") as fp:
                self.assertEqual(fp.read(8), PNG_SIGNATURE)

    def test_plot_empty(self):
        with self.assertRaises(ValueError) as cm:
            plot_samples([], "unused.png")
        self.assertEqual(str(cm.exception), "No samples to plot")
