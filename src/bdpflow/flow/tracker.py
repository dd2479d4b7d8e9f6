import ipaddress
import logging
from collections import deque
from typing import Any, Deque, Iterable, Iterator, List, Optional, Tuple

from ..seqnum import advance, relative_to
from .configuration import FlowConfiguration
from .events import EndpointLearned, FlowEvent, PerformanceSample
from .exceptions import (
    CaptureOrderError,
    FlowError,
    FlowStateError,
    NotInFlowError,
    NotLocalToRemoteError,
    OutOfOrderSendError,
    UnknownDirectionError,
    ZeroIntervalRateError,
)
from .logger import FlowLoggerTrace
from .packet import (
    EndpointInfo,
    EndpointRole,
    FlowPacket,
    PacketDirection,
    PacketRecord,
)

USEC_IN_SEC = 1000 * 1000

logger = logging.getLogger("bdpflow.flow")


class FlowTrackerAdapter(logging.LoggerAdapter):
    def process(self, msg: str, kwargs: Any) -> Tuple[str, Any]:
        return "[%s] %s" % (self.extra["id"], msg), kwargs


def _normalize_ip(value: str) -> str:
    return str(ipaddress.ip_address(value))


def _record_addresses(record: PacketRecord) -> Tuple[str, str]:
    try:
        return _normalize_ip(record.source_ip), _normalize_ip(record.destination_ip)
    except ValueError:
        raise NotInFlowError(
            "Dropping %s > %s (invalid address)"
            % (record.source_ip, record.destination_ip),
            record,
        )


class FlowTracker:
    """
    Round-trip time and delivery rate estimator for a single TCP connection.

    Packets are fed to :meth:`ingest` in capture order. The local endpoint is
    learned from the first packet sent from the local address, the remote
    endpoint from the first packet sent back. Every acknowledgment which
    retires an inflight segment produces a
    :class:`~bdpflow.flow.events.PerformanceSample`, computed the way BBR
    computes delivery rate samples.

    .. note:: The trace must start with a local-to-remote packet, ideally the
              SYN of the connection. A capture starting mid-connection yields
              wrong initial sequence numbers.
    """

    def __init__(self, *, configuration: FlowConfiguration) -> None:
        local_ip = _normalize_ip(configuration.local_ip)
        remote_ip = _normalize_ip(configuration.remote_ip)
        if local_ip == remote_ip:
            raise ValueError(
                "Local and remote IP addresses must differ, got %s" % local_ip
            )

        self._configuration = configuration
        self._events: Deque[FlowEvent] = deque()
        self._initial_timestamp: Optional[int] = None
        self._inflight: List[FlowPacket] = []
        self._local: Optional[EndpointInfo] = None
        self._local_ip = local_ip
        self._remote: Optional[EndpointInfo] = None
        self._remote_ip = remote_ip
        self._samples: List[PerformanceSample] = []

        # delivery state
        self._delivered = 0
        self._delivered_time = 0

        # logging
        self._logger = FlowTrackerAdapter(
            logger, {"id": "%s > %s" % (local_ip, remote_ip)}
        )
        self._flow_logger: Optional[FlowLoggerTrace] = None
        if configuration.flow_logger is not None:
            self._flow_logger = configuration.flow_logger.start_trace(
                local_ip=local_ip, remote_ip=remote_ip
            )

    @property
    def bytes_in_flight(self) -> int:
        return sum(packet.record.payload_size for packet in self._inflight)

    @property
    def delivered(self) -> int:
        return self._delivered

    @property
    def delivered_time(self) -> int:
        return self._delivered_time

    @property
    def inflight(self) -> Tuple[FlowPacket, ...]:
        return tuple(self._inflight)

    @property
    def initial_timestamp(self) -> Optional[int]:
        return self._initial_timestamp

    @property
    def local(self) -> Optional[EndpointInfo]:
        return self._local

    @property
    def remote(self) -> Optional[EndpointInfo]:
        return self._remote

    @property
    def samples(self) -> Tuple[PerformanceSample, ...]:
        return tuple(self._samples)

    def close(self) -> None:
        """
        End the event trace, if any.
        """
        if self._flow_logger is not None:
            self._configuration.flow_logger.end_trace(self._flow_logger)
            self._flow_logger = None

    def ingest(self, record: PacketRecord) -> FlowPacket:
        """
        Process a captured packet and return it annotated with flow context.

        Raises a :class:`~bdpflow.flow.exceptions.FlowError` if the packet is
        rejected, in which case the tracker state is left unchanged.
        """
        try:
            return self._consume(record)
        except FlowError as exc:
            if self._flow_logger is not None:
                self._flow_logger.log_event(
                    category="transport",
                    event="packet_dropped",
                    data={"trigger": exc.reason},
                    timestamp=self._relative_timestamp(record),
                )
            raise

    def next_event(self) -> Optional[FlowEvent]:
        """
        Retrieve the next event from the event buffer.

        Returns `None` if there are no buffered events.
        """
        try:
            return self._events.popleft()
        except IndexError:
            return None

    def _consume(self, record: PacketRecord) -> FlowPacket:
        src, dst = _record_addresses(record)
        if (src, dst) not in (
            (self._local_ip, self._remote_ip),
            (self._remote_ip, self._local_ip),
        ):
            raise NotInFlowError(
                "Dropping %s > %s (not in the flow)" % (src, dst), record
            )

        if self._local is None:
            # the first packet of the flow must be local-to-remote
            if src != self._local_ip:
                raise NotLocalToRemoteError(
                    "Dropping %s > %s (not local-to-remote)" % (src, dst), record
                )
            self._initial_timestamp = record.timestamp
            return self._learn_endpoint(EndpointRole.LOCAL, src, record)
        elif self._remote is None:
            # until the remote answers, local packets replace the local endpoint
            if src == self._local.ip:
                return self._learn_endpoint(
                    EndpointRole.LOCAL, src, record, relearned=True
                )
            return self._learn_endpoint(EndpointRole.REMOTE, src, record)

        packet = self._create_flow_packet(record)
        if packet.direction == PacketDirection.LOCAL_TO_REMOTE:
            self._on_send(packet)
        elif record.is_ack:
            self._on_ack(packet)
        return packet

    def _create_flow_packet(self, record: PacketRecord) -> FlowPacket:
        if self._local is None or self._remote is None:
            raise FlowStateError(
                "Endpoints are not known, local=%s, remote=%s"
                % (self._local, self._remote)
            )

        src, dst = _record_addresses(record)
        if src == self._local.ip and dst == self._remote.ip:
            direction = PacketDirection.LOCAL_TO_REMOTE
            sender, receiver = self._local, self._remote
        elif src == self._remote.ip and dst == self._local.ip:
            direction = PacketDirection.REMOTE_TO_LOCAL
            sender, receiver = self._remote, self._local
        else:
            raise UnknownDirectionError(
                "Unknown direction %s > %s" % (src, dst), record
            )

        relative_seq_num = relative_to(record.seq_num, sender.initial_seq_num)
        return FlowPacket(
            record=record,
            direction=direction,
            relative_timestamp=self._relative_timestamp(record),
            relative_seq_num=relative_seq_num,
            relative_ack_num=relative_to(record.ack_num, receiver.initial_seq_num),
            expected_ack_num=advance(relative_seq_num, record.payload_size),
        )

    def _find_sent(self, ack: FlowPacket) -> Optional[int]:
        for index, packet in enumerate(self._inflight):
            if packet.expected_ack_num == ack.relative_ack_num:
                return index
        return None

    def _learn_endpoint(
        self,
        role: EndpointRole,
        ip: str,
        record: PacketRecord,
        relearned: bool = False,
    ) -> FlowPacket:
        endpoint = EndpointInfo(ip=ip, initial_seq_num=record.seq_num)
        if role == EndpointRole.LOCAL:
            self._local = endpoint
            direction = PacketDirection.LOCAL_TO_REMOTE
        else:
            self._remote = endpoint
            direction = PacketDirection.REMOTE_TO_LOCAL

        packet = FlowPacket(
            record=record,
            direction=direction,
            relative_timestamp=self._relative_timestamp(record),
        )
        self._logger.debug(
            "%s %s: %s",
            "Update" if relearned else "Initialize",
            role.name.lower(),
            packet,
        )
        self._events.append(
            EndpointLearned(
                role=role,
                endpoint=endpoint,
                timestamp=packet.relative_timestamp,
                relearned=relearned,
            )
        )
        if self._flow_logger is not None:
            self._flow_logger.log_event(
                category="transport",
                event="endpoint_learned",
                data=self._flow_logger.encode_endpoint(role, endpoint),
                timestamp=packet.relative_timestamp,
            )
        return packet

    def _on_ack(self, ack: FlowPacket) -> None:
        """
        Retire the inflight segment matched by `ack` and every segment sent
        before it, and record a performance sample for the matched segment.
        """
        index = self._find_sent(ack)
        if index is None:
            return
        sent = self._inflight[index]

        rtt = ack.record.timestamp - sent.record.timestamp
        if rtt < 0:
            raise CaptureOrderError(
                "Ack %s captured before acknowledged packet %s" % (ack, sent),
                ack.record,
            )

        delivered = self._delivered + sent.record.payload_size
        delivered_time = ack.record.timestamp
        interval = delivered_time - sent.delivered_time
        if interval < 0:
            raise CaptureOrderError(
                "Ack %s captured before previous delivery of %s" % (ack, sent),
                ack.record,
            )
        elif interval == 0:
            raise ZeroIntervalRateError(
                "Zero delivery interval for ack %s of %s" % (ack, sent), ack.record
            )

        delivery_rate = 8 * USEC_IN_SEC * (delivered - sent.delivered) / interval
        self._delivered = delivered
        self._delivered_time = delivered_time

        # the timestamp is the one of the acking packet, not the sent one
        sample = PerformanceSample(
            timestamp=ack.relative_timestamp,
            rtt=rtt,
            delivery_rate=delivery_rate,
            sent_window_size=sent.record.window_size,
            ack_window_size=ack.record.window_size,
        )
        self._logger.debug(
            "Got ack for inflight packet: ack_num=%d, rate=%.0fkb/s, %s",
            ack.relative_ack_num,
            delivery_rate / 1000,
            sample,
        )
        self._samples.append(sample)
        self._events.append(sample)
        del self._inflight[: index + 1]

        if self._flow_logger is not None:
            self._flow_logger.log_event(
                category="recovery",
                event="metrics_updated",
                data=self._flow_logger.encode_sample(
                    sample,
                    delivered=self._delivered,
                    bytes_in_flight=self.bytes_in_flight,
                ),
                timestamp=ack.relative_timestamp,
            )

    def _on_send(self, packet: FlowPacket) -> None:
        """
        Track a local-to-remote segment until it is acknowledged.

        Segments without payload are never acknowledged and are not tracked.
        """
        if packet.record.payload_size == 0:
            return

        if self._inflight:
            last = self._inflight[-1]
            if last.expected_ack_num >= packet.expected_ack_num:
                raise OutOfOrderSendError(
                    "Wrong order of expected ack number, last inflight %s, current %s"
                    % (last, packet),
                    packet.record,
                )

        packet.delivered = self._delivered
        packet.delivered_time = self._delivered_time
        self._inflight.append(packet)

        if self._flow_logger is not None:
            self._flow_logger.log_event(
                category="recovery",
                event="packet_sent",
                data=self._flow_logger.encode_packet(packet),
                timestamp=packet.relative_timestamp,
            )

    def _relative_timestamp(self, record: PacketRecord) -> int:
        if self._initial_timestamp is None:
            return 0
        return record.timestamp - self._initial_timestamp


def track_flow(
    records: Iterable[PacketRecord], configuration: FlowConfiguration
) -> Iterator[PerformanceSample]:
    """
    Feed `records` to a new :class:`FlowTracker` and yield its samples.

    Rejected packets are logged and skipped.
    """
    tracker = FlowTracker(configuration=configuration)
    try:
        for record in records:
            try:
                packet = tracker.ingest(record)
            except FlowError as exc:
                logger.debug(exc)
                continue
            logger.debug(packet)

            event = tracker.next_event()
            while event is not None:
                if isinstance(event, PerformanceSample):
                    yield event
                event = tracker.next_event()
    finally:
        tracker.close()
