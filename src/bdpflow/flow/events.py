from dataclasses import dataclass

from .packet import EndpointInfo, EndpointRole


class FlowEvent:
    """
    Base class for flow events.
    """


@dataclass(frozen=True)
class EndpointLearned(FlowEvent):
    """
    The EndpointLearned event is fired whenever the tracker records the
    identity of one side of the connection.
    """

    role: EndpointRole
    "Which side of the connection was learned."

    endpoint: EndpointInfo
    "The IP address and initial sequence number of the endpoint."

    timestamp: int
    "The relative timestamp of the packet, in microseconds."

    relearned: bool = False
    "Whether a previously learned local endpoint was overwritten."


@dataclass(frozen=True)
class PerformanceSample(FlowEvent):
    """
    The PerformanceSample event is fired whenever an acknowledgment retires
    an inflight segment.
    """

    timestamp: int
    "The relative timestamp of the acknowledging packet, in microseconds."

    rtt: int
    "The round-trip time of the acknowledged segment, in microseconds."

    delivery_rate: float
    "The delivery rate, in bits per second."

    sent_window_size: int
    "The window size advertised by the sender of the segment."

    ack_window_size: int
    "The window size advertised by the acknowledging packet."

    def __str__(self) -> str:
        return "ts: %d msec, rtt: %d msec, win: %d, %d" % (
            self.timestamp // 1000,
            self.rtt // 1000,
            self.sent_window_size,
            self.ack_window_size,
        )
