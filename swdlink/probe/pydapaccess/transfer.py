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

"""@brief DAP_Transfer register operations.

A DAP_Transfer command carries a list of DP and AP register operations. Each operation is
encoded as one request byte, followed by four little endian data bytes for writes. The response
holds the number of operations that completed, the SWD ACK of the last operation, and four bytes
for every completed read.

The AP register bank is not part of the request byte. It is chosen by writing the DP SELECT
register, which is itself just another operation in the list.
"""

import logging
from enum import Enum
from typing import (List, NamedTuple, Optional, Sequence, Tuple)

from .cmsis_dap_core import (
    Command,
    DAPTransferResponse,
    MAX_COMMAND_COUNT,
    )
from ...core.exceptions import (
    ProtocolMismatchError,
    TransferIncompleteError,
    TruncatedResponseError,
    )

LOG = logging.getLogger(__name__)

# DAP_Transfer request byte fields.
AP_ACC = 1 << 0
DP_ACC = 0 << 0
READ = 1 << 1
WRITE = 0 << 1
A32_MASK = 0x0c
VALUE_MATCH = 1 << 4
MATCH_MASK = 1 << 5

## Size of the DAP_Transfer request and response headers.
TRANSFER_REQUEST_HEADER_SIZE = 3
TRANSFER_RESPONSE_HEADER_SIZE = 3

class Port(Enum):
    """@brief Register address space targeted by an operation."""
    DP = 0
    AP = 1

class Direction(Enum):
    WRITE = 0
    READ = 1

class RegisterOp(NamedTuple):
    """@brief One DP or AP register access within a DAP_Transfer command.

    Only bits [3:2] of `address` are sent; the rest of an AP register address is selected through
    DP SELECT beforehand.

    When `match` is set, a write becomes a match mask write and a read becomes a value match read
    that waits in the probe until the register, masked, equals `value`. Neither of these returns
    data in the response.
    """
    port: Port
    address: int
    direction: Direction
    value: Optional[int] = None
    match: bool = False

    @classmethod
    def read_dp(cls, address: int) -> "RegisterOp":
        return cls(Port.DP, address, Direction.READ)

    @classmethod
    def write_dp(cls, address: int, value: int) -> "RegisterOp":
        return cls(Port.DP, address, Direction.WRITE, value)

    @classmethod
    def read_ap(cls, address: int) -> "RegisterOp":
        return cls(Port.AP, address, Direction.READ)

    @classmethod
    def write_ap(cls, address: int, value: int) -> "RegisterOp":
        return cls(Port.AP, address, Direction.WRITE, value)

    @classmethod
    def match_mask(cls, mask: int) -> "RegisterOp":
        """@brief Set the mask applied by following value match reads."""
        return cls(Port.DP, 0, Direction.WRITE, mask, match=True)

    @classmethod
    def read_match(cls, port: Port, address: int, value: int) -> "RegisterOp":
        """@brief Read a register repeatedly until (register & match mask) == value."""
        return cls(port, address, Direction.READ, value, match=True)

    @property
    def is_read(self) -> bool:
        return self.direction is Direction.READ

    @property
    def has_request_data(self) -> bool:
        """@brief Whether four data bytes follow the request byte."""
        return (not self.is_read) or self.match

    @property
    def has_response_data(self) -> bool:
        """@brief Whether the operation returns a word in the response."""
        return self.is_read and not self.match

    @property
    def request(self) -> int:
        """@brief The DAP_Transfer request byte."""
        request = (AP_ACC if self.port is Port.AP else DP_ACC) \
                | (READ if self.is_read else WRITE) \
                | (self.address & A32_MASK)
        if self.match:
            request |= VALUE_MATCH if self.is_read else MATCH_MASK
        return request

    def encode(self) -> bytes:
        """@brief Request byte plus data bytes, if any.
        @exception ValueError The operation needs a data value and has none, or it does not fit
            in 32 bits.
        """
        if not self.has_request_data:
            return bytes([self.request])
        if self.value is None:
            raise ValueError(f"register operation {self} requires a value")
        if not 0 <= self.value <= 0xffffffff:
            raise ValueError(f"register value 0x{self.value:x} is out of range")
        return bytes([self.request]) + self.value.to_bytes(4, 'little')

    def __str__(self) -> str:
        desc = f"{self.port.name} 0x{self.address:02x} {self.direction.name.lower()}"
        if self.match:
            desc += " match"
        if self.value is not None:
            desc += f" 0x{self.value:08x}"
        return desc

class TransferResult:
    """@brief Decoded DAP_Transfer response.

    `values` always holds the words returned by completed read operations, in request order. If
    not every operation completed, or the final ACK was not OK, `error` holds a
    TransferIncompleteError describing it; otherwise `error` is None.
    """

    def __init__(self, values: List[int], completed: int, response: int,
            error: Optional[TransferIncompleteError] = None) -> None:
        self._values = values
        self._completed = completed
        self._response = response
        self._error = error

    @property
    def values(self) -> List[int]:
        return self._values

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def response(self) -> int:
        """@brief The raw transfer response byte."""
        return self._response

    @property
    def ack(self) -> int:
        return self._response & DAPTransferResponse.ACK_MASK

    @property
    def error(self) -> Optional[TransferIncompleteError]:
        return self._error

    @property
    def is_complete(self) -> bool:
        return self._error is None

    def check(self) -> List[int]:
        """@brief Return the read values, or raise the attached error."""
        if self._error is not None:
            raise self._error
        return self._values

    def __repr__(self) -> str:
        values = ', '.join(f'0x{v:08x}' for v in self._values)
        return f"<TransferResult completed={self._completed} response=0x{self._response:02x} values=[{values}]>"

def encode_transfer(ops: Sequence[RegisterOp], dap_index: int = 0) -> bytes:
    """@brief Build the DAP_Transfer sub-command for a list of register operations."""
    if not 0 < len(ops) <= MAX_COMMAND_COUNT:
        raise ValueError(f"DAP_Transfer requires 1 to {MAX_COMMAND_COUNT} operations, got {len(ops)}")
    buf = bytearray([Command.DAP_TRANSFER, dap_index, len(ops)])
    for op in ops:
        buf += op.encode()
    return bytes(buf)

def transfer_response_size(ops: Sequence[RegisterOp]) -> int:
    """@brief Size of the response when every operation completes."""
    return TRANSFER_RESPONSE_HEADER_SIZE + 4 * sum(1 for op in ops if op.has_response_data)

def _describe_failure(response: int) -> str:
    ack = response & DAPTransferResponse.ACK_MASK
    if ack == DAPTransferResponse.ACK_FAULT:
        return "SWD fault"
    elif ack == DAPTransferResponse.ACK_WAIT:
        return "SWD wait timeout"
    elif ack == DAPTransferResponse.ACK_NO_ACK:
        return "no ACK received"
    elif ack != DAPTransferResponse.ACK_OK:
        return "unexpected ACK value (%d) returned by probe" % ack
    elif response & DAPTransferResponse.PROTOCOL_ERROR_MASK:
        return "SWD protocol error"
    elif response & DAPTransferResponse.VALUE_MISMATCH_MASK:
        return "value mismatch"
    else:
        return "transfer stopped early"

def decode_transfer(ops: Sequence[RegisterOp], data: bytes) -> Tuple[TransferResult, int]:
    """@brief Decode a DAP_Transfer response.

    @param ops The operations that were sent, in order.
    @param data Response bytes starting at the DAP_Transfer command ID. May extend past the end of
        this sub-command's response.
    @return Tuple of the TransferResult and the number of bytes consumed.

    @exception ProtocolMismatchError The response is for another command, or claims more operations
        completed than were sent.
    @exception TruncatedResponseError The data ends before all expected read values.
    """
    if len(data) < TRANSFER_RESPONSE_HEADER_SIZE:
        raise TruncatedResponseError("DAP_TRANSFER response header is truncated")
    if data[0] != Command.DAP_TRANSFER:
        raise ProtocolMismatchError(f"expected DAP_TRANSFER response, got command 0x{data[0]:02x}")

    completed = data[1]
    response = data[2]
    if completed > len(ops):
        raise ProtocolMismatchError(f"DAP_TRANSFER response reports {completed} completed operations "
                f"but only {len(ops)} were requested")

    read_count = sum(1 for op in ops[:completed] if op.has_response_data)
    consumed = TRANSFER_RESPONSE_HEADER_SIZE + 4 * read_count
    if len(data) < consumed:
        raise TruncatedResponseError(f"DAP_TRANSFER response has {len(data)} bytes, "
                f"{consumed} needed for {read_count} read values")

    values = [int.from_bytes(data[offset:offset + 4], 'little')
            for offset in range(TRANSFER_RESPONSE_HEADER_SIZE, consumed, 4)]

    error = None
    failed = (response & DAPTransferResponse.ACK_MASK) != DAPTransferResponse.ACK_OK \
            or (response & (DAPTransferResponse.PROTOCOL_ERROR_MASK | DAPTransferResponse.VALUE_MISMATCH_MASK)) \
            or (completed != len(ops))
    if failed:
        error = TransferIncompleteError(_describe_failure(response),
                ack=response & DAPTransferResponse.ACK_MASK,
                completed=completed,
                requested=len(ops),
                values=values)
        LOG.warning("%s", error)

    return TransferResult(values, completed, response, error), consumed
