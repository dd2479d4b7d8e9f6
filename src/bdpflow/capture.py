"""
Packet source: decode TCP packets from pcap capture files.
"""
import ipaddress
import logging
from typing import BinaryIO, Callable, Dict, Iterable, Iterator, Optional, Union

import dpkt
from dpkt.sll2 import SLL2

from .flow.packet import PacketRecord

logger = logging.getLogger("bdpflow.capture")


# link-layer header types, as stored in pcap file headers
LINKTYPE_NULL = 0
LINKTYPE_ETHERNET = 1
LINKTYPE_RAW = 101
LINKTYPE_LINUX_SLL = 113
LINKTYPE_LINUX_SLL2 = 276

# DLT_RAW, which some platforms write instead of LINKTYPE_RAW
DLT_RAW_VALUES = (12, 14)


def _decode_raw(buf: bytes) -> dpkt.Packet:
    if buf and buf[0] >> 4 == 6:
        return dpkt.ip6.IP6(buf)
    return dpkt.ip.IP(buf)


LINK_DECODERS: Dict[int, Callable[[bytes], dpkt.Packet]] = {
    LINKTYPE_NULL: lambda buf: dpkt.loopback.Loopback(buf).data,
    LINKTYPE_ETHERNET: lambda buf: dpkt.ethernet.Ethernet(buf).data,
    LINKTYPE_RAW: _decode_raw,
    LINKTYPE_LINUX_SLL: lambda buf: dpkt.sll.SLL(buf).data,
    LINKTYPE_LINUX_SLL2: lambda buf: SLL2(buf).data,
}
LINK_DECODERS.update((value, _decode_raw) for value in DLT_RAW_VALUES)


def _decode_link(datalink: int, buf: bytes) -> Optional[dpkt.Packet]:
    try:
        decoder = LINK_DECODERS[datalink]
    except KeyError:
        raise ValueError("Unsupported link type: %d" % datalink)
    return decoder(buf)


def decode_packet(
    datalink: int, timestamp: float, buf: bytes
) -> Optional[PacketRecord]:
    """
    Decode a single captured frame.

    Returns `None` if the frame does not carry a TCP segment over IPv4 or IPv6.
    """
    ip = _decode_link(datalink, buf)
    if not isinstance(ip, (dpkt.ip.IP, dpkt.ip6.IP6)):
        return None
    tcp = ip.data
    if not isinstance(tcp, dpkt.tcp.TCP):
        return None

    return PacketRecord(
        timestamp=int(round(timestamp * 1000000)),
        source_ip=str(ipaddress.ip_address(ip.src)),
        destination_ip=str(ipaddress.ip_address(ip.dst)),
        seq_num=tcp.seq,
        ack_num=tcp.ack,
        is_syn=bool(tcp.flags & dpkt.tcp.TH_SYN),
        is_ack=bool(tcp.flags & dpkt.tcp.TH_ACK),
        window_size=tcp.win,
        payload_size=len(tcp.data),
    )


def read_packets(fp: BinaryIO) -> Iterator[PacketRecord]:
    """
    Read TCP packets from a pcap stream, in capture order.
    """
    reader = dpkt.pcap.Reader(fp)
    datalink = reader.datalink()
    if datalink not in LINK_DECODERS:
        raise ValueError("Unsupported link type: %d" % datalink)
    for timestamp, buf in reader:
        try:
            record = decode_packet(datalink, timestamp, buf)
        except dpkt.UnpackError as exc:
            logger.debug("Skipping undecodable frame at %f: %s", timestamp, exc)
            continue
        if record is not None:
            yield record


def read_pcap(path: Union[str, bytes]) -> Iterator[PacketRecord]:
    """
    Read TCP packets from the pcap file at `path`, in capture order.
    """
    with open(path, "rb") as fp:
        yield from read_packets(fp)


def filter_flow(
    records: Iterable[PacketRecord], ip_a: str, ip_b: str
) -> Iterator[PacketRecord]:
    """
    Keep the packets exchanged between `ip_a` and `ip_b`, in either direction.
    """
    addresses = {str(ipaddress.ip_address(ip_a)), str(ipaddress.ip_address(ip_b))}
    for record in records:
        if {record.source_ip, record.destination_ip} == addresses:
            yield record
