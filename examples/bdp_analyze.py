import argparse
import logging
import sys

from bdpflow.capture import filter_flow, read_pcap
from bdpflow.flow.configuration import FlowConfiguration
from bdpflow.flow.logger import FlowFileLogger
from bdpflow.flow.tracker import track_flow
from bdpflow.output import write_samples

logger = logging.getLogger("analyze")


def main(configuration: FlowConfiguration, input_path: str, output_path: str) -> None:
    records = filter_flow(
        read_pcap(input_path), configuration.local_ip, configuration.remote_ip
    )
    samples = track_flow(records, configuration)
    if output_path == "-":
        count = write_samples(samples, sys.stdout)
    else:
        with open(output_path, "w") as fp:
            count = write_samples(samples, fp)
    logger.info("Wrote %d samples", count)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Estimate RTT and delivery rate of a TCP connection"
    )
    parser.add_argument("-i", "--input", required=True, help="input path (pcap)")
    parser.add_argument(
        "-l",
        "--local-ip",
        required=True,
        help="IP address of the side which opened the connection",
    )
    parser.add_argument(
        "-r", "--remote-ip", required=True, help="IP address of the other side"
    )
    parser.add_argument(
        "-o", "--output", default="-", help="output path (csv), defaults to stdout"
    )
    parser.add_argument(
        "-q",
        "--flow-log",
        type=str,
        help="log flow events to JSON files in the specified directory",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="increase logging verbosity"
    )

    args = parser.parse_args()

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    configuration = FlowConfiguration(local_ip=args.local_ip, remote_ip=args.remote_ip)
    if args.flow_log:
        configuration.flow_logger = FlowFileLogger(args.flow_log)

    main(configuration=configuration, input_path=args.input, output_path=args.output)
