from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PacketDirection(Enum):
    LOCAL_TO_REMOTE = 0
    REMOTE_TO_LOCAL = 1


class EndpointRole(Enum):
    LOCAL = 0
    REMOTE = 1


@dataclass(frozen=True)
class PacketRecord:
    """
    A decoded TCP packet, as captured on the wire.
    """

    timestamp: int
    "The capture timestamp, in microseconds."

    source_ip: str
    "The source IP address."

    destination_ip: str
    "The destination IP address."

    seq_num: int
    "The absolute TCP sequence number."

    ack_num: int
    "The absolute TCP acknowledgment number."

    is_syn: bool
    "Whether the SYN flag is set."

    is_ack: bool
    "Whether the ACK flag is set."

    window_size: int
    "The advertised window size."

    payload_size: int
    "The number of TCP payload bytes."


@dataclass(frozen=True)
class EndpointInfo:
    ip: str
    "The IP address of the endpoint."

    initial_seq_num: int
    "The sequence number of the first packet observed from the endpoint."

    def __str__(self) -> str:
        return "%s, seq: %d" % (self.ip, self.initial_seq_num)


@dataclass
class FlowPacket:
    """
    A packet annotated with its position in the flow.
    """

    record: PacketRecord
    direction: PacketDirection
    relative_timestamp: int
    relative_seq_num: int = 0
    relative_ack_num: int = 0
    expected_ack_num: int = 1

    # delivery state snapshot, only set for inflight segments
    delivered: Optional[int] = None
    delivered_time: Optional[int] = None

    def __str__(self) -> str:
        record = self.record
        msg = "%d" % self.relative_timestamp
        if self.direction == PacketDirection.LOCAL_TO_REMOTE:
            msg += " %s >  %s" % (record.source_ip, record.destination_ip)
        else:
            msg += " %s  < %s" % (record.destination_ip, record.source_ip)
        if record.is_syn:
            msg += " syn"
        if record.is_ack:
            msg += " ack"
        msg += " %d. seq %d (exp %d) ack %d" % (
            record.payload_size,
            self.relative_seq_num,
            self.expected_ack_num,
            self.relative_ack_num,
        )
        return msg
