from dataclasses import dataclass
from typing import Iterable, List, TextIO

from .flow.events import PerformanceSample

CSV_HEADER = "# bandwidth (bps)\trtt (usec)\twindow sent\twindow ack"


@dataclass
class SampleRow:
    delivery_rate: int
    rtt: int
    sent_window_size: int
    ack_window_size: int


def format_sample(sample: PerformanceSample) -> str:
    return "%d\t%d\t%d\t%d" % (
        sample.delivery_rate,
        sample.rtt,
        sample.sent_window_size,
        sample.ack_window_size,
    )


def write_samples(samples: Iterable[PerformanceSample], fp: TextIO) -> int:
    """
    Write `samples` as tab-separated lines, preceded by a header comment.

    Returns the number of samples written.
    """
    count = 0
    fp.write(CSV_HEADER + "\n")
    for sample in samples:
        fp.write(format_sample(sample) + "\n")
        count += 1
    return count


def read_samples(fp: TextIO) -> List[SampleRow]:
    """
    Read samples written by :func:`write_samples`.
    """
    rows = []
    for lineno, line in enumerate(fp, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split("\t")
        if len(fields) != 4:
            raise ValueError(
                "Line %d: expected 4 fields, got %d" % (lineno, len(fields))
            )
        try:
            rows.append(SampleRow(*(int(field) for field in fields)))
        except ValueError:
            raise ValueError("Line %d: invalid sample %r" % (lineno, line))
    return rows
