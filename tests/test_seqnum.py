from unittest import TestCase

from bdpflow.seqnum import SEQ_MODULUS, advance, relative_to


class SeqNumTest(TestCase):
    def test_relative_to(self):
        self.assertEqual(relative_to(1500, 1000), 500)
        self.assertEqual(relative_to(1000, 1000), 0)

    def test_relative_to_wraparound(self):
        self.assertEqual(relative_to(5, SEQ_MODULUS - 5), 10)
        self.assertEqual(relative_to(999, 1000), SEQ_MODULUS - 1)

    def test_relative_to_out_of_range(self):
        with self.assertRaises(ValueError) as cm:
            relative_to(SEQ_MODULUS, 0)
        self.assertEqual(str(cm.exception), "Sequence number out of range: 4294967296")

        with self.assertRaises(ValueError):
            relative_to(0, -1)

    def test_advance(self):
        self.assertEqual(advance(1, 1460), 1461)
        self.assertEqual(advance(SEQ_MODULUS - 1, 1), 0)
        self.assertEqual(advance(SEQ_MODULUS - 10, 100), 90)

    def test_advance_negative(self):
        with self.assertRaises(ValueError) as cm:
            advance(1, -1)
        self.assertEqual(str(cm.exception), "Cannot advance by a negative size: -1")
