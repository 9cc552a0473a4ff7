# swdlink
# Copyright (c) 2006-2013,2018-2021 Arm Limited
# Copyright (c) 2021-2022 Chris Reed
# Copyright (c) 2026 swdlink contributors
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import logging
from typing import (Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple, Type, Union)

from .cmsis_dap_core import (
    Command,
    DAP_DEFAULT_PORT,
    DAP_OK,
    DEFAULT_PACKET_SIZE,
    EXECUTE_COMMANDS_HEADER_SIZE,
    INTEGER_INFOS,
    InfoID,
    MAX_COMMAND_COUNT,
    command_name,
    )
from .transfer import (
    RegisterOp,
    TransferResult,
    decode_transfer,
    encode_transfer,
    transfer_response_size,
    )
from ...core.exceptions import (
    BatchTooLargeError,
    CommandFailedError,
    ProtocolMismatchError,
    TransportError,
    TruncatedResponseError,
    )
from ...utility.hex import dump_packet_to_str

LOG = logging.getLogger(__name__)

TRACE = LOG.getChild("trace")
TRACE.setLevel(logging.CRITICAL)

# Sub-command specifications. Each is an immutable value describing one command inside a
# DAP_ExecuteCommands packet; the codec table below supplies its wire format.

class Info(NamedTuple):
    """@brief DAP_Info query."""
    info_id: InfoID

class Connect(NamedTuple):
    """@brief DAP_Connect to the given port."""
    port: int = DAP_DEFAULT_PORT

class SetClock(NamedTuple):
    """@brief DAP_SWJ_Clock with the frequency in Hz."""
    frequency: int

class RawSequence(NamedTuple):
    """@brief DAP_SWJ_Sequence of _bit_count_ SWDIO/TMS bits, sent LSB first."""
    bit_count: int
    bits: int

class Transfer(NamedTuple):
    """@brief DAP_Transfer of a list of register operations."""
    ops: Tuple[RegisterOp, ...]
    dap_index: int = 0

SubCommandSpec = Union[Info, Connect, SetClock, RawSequence, Transfer]

Encoder = Callable[[Any], bytes]
Decoder = Callable[[Any, bytes], Tuple[Any, int]]

class SubCommandCodec(NamedTuple):
    encode: Encoder
    decode: Decoder
    ## Smallest response the sub-command can produce.
    response_size: Callable[[Any], int]

def _check_command_id(data: bytes, command_id: int, size: int) -> None:
    if len(data) < size:
        raise TruncatedResponseError(f"{command_name(command_id)} response is truncated")
    if data[0] != command_id:
        raise ProtocolMismatchError(f"expected {command_name(command_id)} response, "
                f"got {command_name(data[0])}")

def _check_status(data: bytes, command_id: int) -> int:
    _check_command_id(data, command_id, 2)
    if data[1] != DAP_OK:
        raise CommandFailedError(f"{command_name(command_id)} failed (status 0x{data[1]:02x})")
    return data[1]

def _encode_info(spec: Info) -> bytes:
    return bytes([Command.DAP_INFO, spec.info_id.value])

def _decode_info(spec: Info, data: bytes) -> Tuple[Union[str, int, None], int]:
    """@brief Decode a DAP_Info response.

    Integer infos return an int built from 1, 2, or 4 little endian bytes. String infos are sent
    as C strings; the terminating NUL is dropped if it is included in the length. A zero length
    string info returns None.
    """
    _check_command_id(data, Command.DAP_INFO, 2)
    length = data[1]
    consumed = 2 + length
    if len(data) < consumed:
        raise TruncatedResponseError(f"DAP_INFO response for {spec.info_id.name} claims {length} bytes, "
                f"only {len(data) - 2} available")
    payload = bytes(data[2:consumed])

    if spec.info_id in INTEGER_INFOS:
        if length not in (1, 2, 4):
            raise ProtocolMismatchError(f"invalid DAP_INFO response length for {spec.info_id.name}")
        return int.from_bytes(payload, 'little'), consumed

    if length == 0:
        return None, consumed
    if payload.endswith(b'\x00'):
        payload = payload[:-1]
    return payload.decode('utf-8', 'replace'), consumed

def _encode_connect(spec: Connect) -> bytes:
    return bytes([Command.DAP_CONNECT, spec.port])

def _decode_connect(spec: Connect, data: bytes) -> Tuple[int, int]:
    _check_command_id(data, Command.DAP_CONNECT, 2)
    port = data[1]
    if port == 0:
        raise CommandFailedError("DAP_CONNECT failed")
    if spec.port != DAP_DEFAULT_PORT and port != spec.port:
        raise CommandFailedError(f"DAP_CONNECT selected port {port} instead of {spec.port}")
    return port, 2

def _encode_set_clock(spec: SetClock) -> bytes:
    if not 0 < spec.frequency <= 0xffffffff:
        raise ValueError(f"invalid SWJ clock frequency {spec.frequency}")
    return bytes([Command.DAP_SWJ_CLOCK]) + spec.frequency.to_bytes(4, 'little')

def _encode_raw_sequence(spec: RawSequence) -> bytes:
    if not 0 < spec.bit_count <= 256:
        raise ValueError(f"SWJ sequence length {spec.bit_count} is out of range (must be 1-256)")
    byte_count = (spec.bit_count + 7) // 8
    # A count of 256 is encoded as 0.
    return bytes([Command.DAP_SWJ_SEQUENCE, spec.bit_count & 0xff]) \
            + (spec.bits & ((1 << (8 * byte_count)) - 1)).to_bytes(byte_count, 'little')

def _decode_status(command_id: int) -> Decoder:
    def decode(spec: Any, data: bytes) -> Tuple[int, int]:
        return _check_status(data, command_id), 2
    return decode

def _encode_transfer(spec: Transfer) -> bytes:
    return encode_transfer(spec.ops, spec.dap_index)

def _decode_transfer(spec: Transfer, data: bytes) -> Tuple[TransferResult, int]:
    return decode_transfer(spec.ops, data)

## Dispatch table from sub-command spec class to its codec.
CODECS: Dict[Type, SubCommandCodec] = {
    Info: SubCommandCodec(_encode_info, _decode_info, lambda spec: 2),
    Connect: SubCommandCodec(_encode_connect, _decode_connect, lambda spec: 2),
    SetClock: SubCommandCodec(_encode_set_clock, _decode_status(Command.DAP_SWJ_CLOCK), lambda spec: 2),
    RawSequence: SubCommandCodec(_encode_raw_sequence, _decode_status(Command.DAP_SWJ_SEQUENCE), lambda spec: 2),
    Transfer: SubCommandCodec(_encode_transfer, _decode_transfer, lambda spec: transfer_response_size(spec.ops)),
    }

def get_codec(spec: SubCommandSpec) -> SubCommandCodec:
    try:
        return CODECS[type(spec)]
    except KeyError:
        raise TypeError(f"unsupported sub-command {spec!r}") from None

def encode_sub_command(spec: SubCommandSpec) -> bytes:
    return get_codec(spec).encode(spec)

def decode_sub_command(spec: SubCommandSpec, data: bytes) -> Tuple[Any, int]:
    """@brief Decode one sub-command response.
    @return Tuple of the decoded value and the number of bytes consumed from _data_.
    """
    return get_codec(spec).decode(spec, data)

class Batch:
    """@brief Builder for a DAP_ExecuteCommands packet.

    Sub-commands are appended in order and encoded right away, so that a sub-command that does not
    fit is rejected by append() instead of when the batch is sent. Each append returns a handle,
    which is the index of the sub-command's decoded value in the list returned by execute() or
    decode_response().

    A batch is sent at most once per execute() call and holds no reference to the transport.
    """

    def __init__(self, packet_size: int = DEFAULT_PACKET_SIZE) -> None:
        self._packet_size = packet_size
        self._specs: List[SubCommandSpec] = []
        self._encoded = bytearray()
        self._response_size = 0

    @property
    def packet_size(self) -> int:
        return self._packet_size

    @property
    def payload_capacity(self) -> int:
        """@brief Bytes available for sub-commands, after the packet header."""
        return self._packet_size - EXECUTE_COMMANDS_HEADER_SIZE

    @property
    def encoded_size(self) -> int:
        return len(self._encoded)

    @property
    def specs(self) -> Sequence[SubCommandSpec]:
        return tuple(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def append(self, spec: SubCommandSpec) -> int:
        """@brief Add a sub-command to the batch.
        @return Handle for the sub-command's result.
        @exception BatchTooLargeError The sub-command's request or minimum response does not fit in
            the space left in the packet, or the batch already holds 255 sub-commands.
        """
        codec = get_codec(spec)
        encoded = codec.encode(spec)
        response_size = codec.response_size(spec)

        if len(self._specs) >= MAX_COMMAND_COUNT:
            raise BatchTooLargeError(f"batch already holds {MAX_COMMAND_COUNT} sub-commands")
        if len(self._encoded) + len(encoded) > self.payload_capacity:
            raise BatchTooLargeError(f"{type(spec).__name__} needs {len(encoded)} bytes but only "
                    f"{self.payload_capacity - len(self._encoded)} are left in the packet")
        if self._response_size + response_size > self.payload_capacity:
            raise BatchTooLargeError(f"response to {type(spec).__name__} would not fit in a "
                    f"{self._packet_size} byte packet")

        self._specs.append(spec)
        self._encoded += encoded
        self._response_size += response_size
        TRACE.debug("append %r -> %d bytes (total %d)", spec, len(encoded), len(self._encoded))
        return len(self._specs) - 1

    def build_packet(self) -> bytes:
        """@brief The full DAP_ExecuteCommands packet, zero padded to the packet size."""
        if not self._specs:
            raise ValueError("cannot build a packet for an empty batch")
        packet = bytearray(self._packet_size)
        packet[0] = Command.DAP_EXECUTE_COMMANDS
        packet[1] = len(self._specs)
        packet[EXECUTE_COMMANDS_HEADER_SIZE:EXECUTE_COMMANDS_HEADER_SIZE + len(self._encoded)] = self._encoded
        return bytes(packet)

    def decode_response(self, data: bytes) -> List[Any]:
        """@brief Decode a DAP_ExecuteCommands response packet.

        @param data Bytes actually received from the probe.
        @return Decoded values in the order the sub-commands were appended.

        @exception ProtocolMismatchError The header is for another command or reports a different
            sub-command count, or a sub-command response is for the wrong command.
        @exception TruncatedResponseError The data ends before all sub-command responses.
        """
        if len(data) < EXECUTE_COMMANDS_HEADER_SIZE:
            raise TruncatedResponseError(f"response of {len(data)} bytes has no DAP_EXECUTE_COMMANDS header")
        if data[0] != Command.DAP_EXECUTE_COMMANDS:
            raise ProtocolMismatchError(f"expected DAP_EXECUTE_COMMANDS response, got {command_name(data[0])}")
        if data[1] != len(self._specs):
            raise ProtocolMismatchError(f"DAP_EXECUTE_COMMANDS response has {data[1]} results "
                    f"for {len(self._specs)} sub-commands")

        results = []
        offset = EXECUTE_COMMANDS_HEADER_SIZE
        for spec in self._specs:
            value, consumed = decode_sub_command(spec, data[offset:])
            offset += consumed
            results.append(value)

        if offset > len(data):
            raise TruncatedResponseError(f"decoded {offset} bytes from a {len(data)} byte response")
        return results

    def execute(self, transport, interface) -> List[Any]:
        """@brief Send the batch as one packet and decode the single response packet.

        @param transport Object with the write(interface_number, out_ep, data) and
            read(interface_number, in_ep, buffer) methods of UsbTransport.
        @param interface The ProbeInterface whose endpoints are used.
        @return Decoded values in the order the sub-commands were appended.
        """
        packet = self.build_packet()
        if TRACE.isEnabledFor(logging.DEBUG):
            TRACE.debug("execute %d sub-commands:\n%s", len(self._specs), dump_packet_to_str(packet))

        written = transport.write(interface.number, interface.ep_out, packet)
        if written != len(packet):
            raise TransportError(f"short write of {written} of {len(packet)} packet bytes")

        buf = bytearray(self._packet_size)
        length = transport.read(interface.number, interface.ep_in, buf)
        response = bytes(buf[:length])
        if TRACE.isEnabledFor(logging.DEBUG):
            TRACE.debug("response (%d bytes):\n%s", length, dump_packet_to_str(response))

        return self.decode_response(response)
