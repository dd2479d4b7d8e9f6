import io
from unittest import TestCase

from bdpflow.flow.events import PerformanceSample
from bdpflow.output import CSV_HEADER, SampleRow, read_samples, write_samples

SAMPLES = [
    PerformanceSample(
        timestamp=500,
        rtt=500,
        delivery_rate=16000000.0,
        sent_window_size=64240,
        ack_window_size=65160,
    ),
    PerformanceSample(
        timestamp=1200,
        rtt=700,
        delivery_rate=2666666.6666666665,
        sent_window_size=64240,
        ack_window_size=1024,
    ),
]


class WriteSamplesTest(TestCase):
    def test_write(self):
        fp = io.StringIO()
        self.assertEqual(write_samples(SAMPLES, fp), 2)
        self.assertEqual(
            fp.getvalue(),
            "# bandwidth (bps)\trtt (usec)\twindow sent\twindow ack\n"
            "16000000\t500\t64240\t65160\n"
            "2666666\t700\t64240\t1024\n",
        )

    def test_write_empty(self):
        fp = io.StringIO()
        self.assertEqual(write_samples([], fp), 0)
        self.assertEqual(fp.getvalue(), CSV_HEADER + "\n")


class ReadSamplesTest(TestCase):
    def test_read(self):
        fp = io.StringIO(
            CSV_HEADER + "\n\n16000000\t500\t64240\t65160\n2666666\t700\t64240\t1024\n"
        )
        self.assertEqual(
            read_samples(fp),
            [
                SampleRow(16000000, 500, 64240, 65160),
                SampleRow(2666666, 700, 64240, 1024),
            ],
        )

    def test_read_wrong_field_count(self):
        with self.assertRaises(ValueError) as cm:
            read_samples(io.StringIO(CSV_HEADER + "\n1\t2\t3\n"))
        self.assertEqual(str(cm.exception), "Line 2: expected 4 fields, got 3")

    def test_read_invalid_value(self):
        with self.assertRaises(ValueError) as cm:
            read_samples(io.StringIO("1\t2\t3\tfour\n"))
        self.assertEqual(str(cm.exception), "Line 1: invalid sample '1\\t2\\t3\\tfour'")
