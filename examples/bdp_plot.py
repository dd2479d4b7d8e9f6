import argparse
import logging

from bdpflow.output import read_samples
from bdpflow.plot import plot_samples

logger = logging.getLogger("plot")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Plot delivery rate against RTT")
    parser.add_argument("-i", "--input", required=True, help="input path (csv)")
    parser.add_argument("-o", "--output", required=True, help="output path (png)")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="increase logging verbosity"
    )

    args = parser.parse_args()

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    with open(args.input, "r") as fp:
        rows = read_samples(fp)
    logger.info("Plotting %d samples to %s", len(rows), args.output)
    plot_samples(rows, args.output)
