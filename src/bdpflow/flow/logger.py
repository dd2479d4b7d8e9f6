import json
import os
from collections import deque
from typing import Any, Deque, Dict, List

from .events import PerformanceSample
from .packet import EndpointInfo, EndpointRole, FlowPacket

TRACE_FORMAT = "JSON"
TRACE_VERSION = "0.1"


class FlowLoggerTrace:
    """
    A TCP flow event trace.

    Events are logged in a format modelled on qlog: each event has a
    `category:event` name, a time in milliseconds relative to the start of
    the capture and a dictionary of data.
    """

    def __init__(self, *, local_ip: str, remote_ip: str) -> None:
        self._events: Deque[Dict[str, Any]] = deque()
        self._local_ip = local_ip
        self._remote_ip = remote_ip

    @property
    def name(self) -> str:
        return "%s-%s" % (
            self._local_ip.replace(":", "_"),
            self._remote_ip.replace(":", "_"),
        )

    def encode_endpoint(self, role: EndpointRole, endpoint: EndpointInfo) -> Dict:
        return {
            "initial_seq_num": endpoint.initial_seq_num,
            "ip": endpoint.ip,
            "role": role.name.lower(),
        }

    def encode_packet(self, packet: FlowPacket) -> Dict:
        return {
            "direction": packet.direction.name.lower(),
            "expected_ack_num": packet.expected_ack_num,
            "length": packet.record.payload_size,
            "relative_ack_num": packet.relative_ack_num,
            "relative_seq_num": packet.relative_seq_num,
        }

    def encode_sample(
        self, sample: PerformanceSample, delivered: int, bytes_in_flight: int
    ) -> Dict:
        return {
            "bytes_in_flight": bytes_in_flight,
            "delivered": delivered,
            "delivery_rate": sample.delivery_rate,
            "latest_rtt": self.encode_time(sample.rtt),
        }

    def encode_time(self, microseconds: int) -> float:
        """
        Convert a time to milliseconds.
        """
        return microseconds / 1000

    # CORE

    def log_event(
        self, *, category: str, event: str, data: Dict, timestamp: int
    ) -> None:
        self._events.append(
            {
                "data": data,
                "name": category + ":" + event,
                "time": self.encode_time(timestamp),
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Return the trace as a dictionary which can be written as JSON.
        """
        return {
            "common_fields": {
                "local_ip": self._local_ip,
                "remote_ip": self._remote_ip,
            },
            "events": list(self._events),
        }


class FlowLogger:
    """
    A TCP flow event logger which stores traces in memory.
    """

    def __init__(self) -> None:
        self._traces: List[FlowLoggerTrace] = []

    def start_trace(self, local_ip: str, remote_ip: str) -> FlowLoggerTrace:
        trace = FlowLoggerTrace(local_ip=local_ip, remote_ip=remote_ip)
        self._traces.append(trace)
        return trace

    def end_trace(self, trace: FlowLoggerTrace) -> None:
        assert trace in self._traces, "FlowLoggerTrace does not belong to FlowLogger"

    def to_dict(self) -> Dict[str, Any]:
        """
        Return the traces as a dictionary which can be written as JSON.
        """
        return {
            "trace_format": TRACE_FORMAT,
            "trace_version": TRACE_VERSION,
            "traces": [trace.to_dict() for trace in self._traces],
        }


class FlowFileLogger(FlowLogger):
    """
    A TCP flow event logger which writes one trace per file.
    """

    def __init__(self, path: str) -> None:
        if not os.path.isdir(path):
            raise ValueError("Flow log output directory '%s' does not exist" % path)
        self.path = path
        super().__init__()

    def end_trace(self, trace: FlowLoggerTrace) -> None:
        trace_path = os.path.join(self.path, trace.name + ".json")
        with open(trace_path, "w") as logger_fp:
            json.dump(
                {
                    "trace_format": TRACE_FORMAT,
                    "trace_version": TRACE_VERSION,
                    "traces": [trace.to_dict()],
                },
                logger_fp,
            )
        self._traces.remove(trace)
