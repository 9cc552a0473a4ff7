# swdlink
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

from typing import (Dict, List, Optional, Tuple)

from swdlink.coresight import (ap, dap)
from swdlink.core.exceptions import (
    CouldNotOpenError,
    TransportTimeoutError,
    )
from swdlink.probe.pydapaccess.cmsis_dap_core import (
    Command,
    DAPTransferResponse,
    DAP_ERROR,
    DAP_OK,
    DEFAULT_PACKET_SIZE,
    InfoID,
    )
from swdlink.probe.pydapaccess.interface.common import (
    ProbeInterface,
    ProtocolGeneration,
    )
from swdlink.probe.pydapaccess.transfer import (
    A32_MASK,
    AP_ACC,
    MATCH_MASK,
    READ,
    VALUE_MATCH,
    )

## Interface used with MockProbe, with HID control-pipe fallback for OUT.
MOCK_INTERFACE = ProbeInterface(0, 0x81, 0, ProtocolGeneration.LEGACY)

class MockTarget:
    """@brief Register model of an SWD target with one AP."""

    def __init__(self, idcode: int = 0x2ba01477, ap_idr: int = 0x24770011, cpuid: int = 0x410fc241,
            power_up_delay: int = 0, never_power_up: bool = False) -> None:
        self.idcode = idcode
        self.ap_idr = ap_idr
        self.memory: Dict[int, int] = {ap.CPUID_ADDRESS: cpuid}
        self.power_up_delay = power_up_delay
        self.never_power_up = never_power_up
        self.ctrl_stat = 0
        self.select = 0
        self.csw = 0
        self.tar = 0
        self.abort_writes: List[int] = []
        self._ctrl_stat_reads = 0

    def _ap_address(self, address: int) -> int:
        return (self.select & dap.SELECT_APBANKSEL_MASK) | (address & A32_MASK)

    def read(self, is_ap: bool, address: int) -> int:
        if is_ap:
            reg = self._ap_address(address)
            if reg == ap.AP_IDR:
                return self.ap_idr
            elif reg == ap.MEM_AP_CSW:
                return self.csw
            elif reg == ap.MEM_AP_TAR:
                return self.tar
            elif reg == ap.MEM_AP_DRW:
                return self.memory.get(self.tar, 0)
            return 0
        elif address == dap.DP_IDR:
            return self.idcode
        elif address == dap.DP_CTRL_STAT:
            self._ctrl_stat_reads += 1
            value = self.ctrl_stat
            if (value & dap.POWER_UP_REQUEST) and not self.never_power_up \
                    and self._ctrl_stat_reads > self.power_up_delay:
                value |= dap.POWER_UP_ACK
            return value
        elif address == dap.DP_SELECT:
            return self.select
        return 0

    def write(self, is_ap: bool, address: int, value: int) -> None:
        if is_ap:
            reg = self._ap_address(address)
            if reg == ap.MEM_AP_CSW:
                self.csw = value
            elif reg == ap.MEM_AP_TAR:
                self.tar = value
            elif reg == ap.MEM_AP_DRW:
                self.memory[self.tar] = value
        elif address == dap.DP_ABORT:
            self.abort_writes.append(value)
        elif address == dap.DP_CTRL_STAT:
            self.ctrl_stat = value
        elif address == dap.DP_SELECT:
            self.select = value

class MockProbe:
    """@brief Fake CMSIS-DAP probe that answers DAP_ExecuteCommands packets like firmware.

    It has the write() and read() methods of UsbTransport, so it can be handed directly to a
    Batch or LinkSequencer. Every packet written is recorded in `packets`.

    Failures are injected with the attributes:
    - `connect_port`: port returned by DAP_Connect, or None to echo the request.
    - `clock_status`, `sequence_status`: status bytes.
    - `fault_register`: (is_ap, address) of a register whose access returns a FAULT ack.
    - `timeout_on_packet`: index of a written packet for which write raises TransportTimeoutError.
    - `raw_responses`: list of raw responses returned instead of computed ones.
    """

    ## Number of times a value match read is retried by the probe.
    MATCH_RETRY = 8

    def __init__(self, target: Optional[MockTarget] = None, packet_size: int = DEFAULT_PACKET_SIZE) -> None:
        self.target = target or MockTarget()
        self.packet_size = packet_size
        self.packets: List[bytes] = []
        self.writes: List[Tuple[int, int]] = []
        self.reads: List[Tuple[int, int]] = []
        self.connect_port: Optional[int] = None
        self.clock_status = DAP_OK
        self.sequence_status = DAP_OK
        self.fault_register: Optional[Tuple[bool, int]] = None
        self.timeout_on_packet: Optional[int] = None
        self.raw_responses: List[bytes] = []
        self.sequences: List[Tuple[int, bytes]] = []
        self.clock: Optional[int] = None
        self.info: Dict[InfoID, bytes] = {
            InfoID.VENDOR: b"ARM\x00",
            InfoID.PRODUCT: b"DAPLink CMSIS-DAP\x00",
            InfoID.SER_NUM: b"0240000034544e45001b00028aa9001e\x00",
            InfoID.FW_VER: b"2.1.0\x00",
            InfoID.PRODUCT_FW_VER: b"",
            InfoID.CAPABILITIES: bytes([0x13]),
            InfoID.MAX_PACKET_COUNT: bytes([4]),
            InfoID.MAX_PACKET_SIZE: (64).to_bytes(2, 'little'),
            }
        self._match_mask = 0xffffffff
        self._response = b''

    def write(self, interface_number: int, out_ep: int, data: bytes) -> int:
        self.writes.append((interface_number, out_ep))
        if self.timeout_on_packet == len(self.packets):
            raise TransportTimeoutError("timeout writing to endpoint 0x00")
        self.packets.append(bytes(data))
        if self.raw_responses:
            self._response = self.raw_responses.pop(0)
        else:
            self._response = self._execute(bytes(data))
        return len(data)

    def read(self, interface_number: int, in_ep: int, buffer: bytearray) -> int:
        self.reads.append((interface_number, in_ep))
        data = self._response[:len(buffer)]
        buffer[:len(data)] = data
        return len(data)

    def _execute(self, packet: bytes) -> bytes:
        assert packet[0] == Command.DAP_EXECUTE_COMMANDS
        count = packet[1]
        offset = 2
        response = bytearray([Command.DAP_EXECUTE_COMMANDS, count])
        for _ in range(count):
            consumed, sub_response = self._sub_command(packet[offset:])
            offset += consumed
            response += sub_response
        assert len(response) <= self.packet_size
        return bytes(response) + bytes(self.packet_size - len(response))

    def _sub_command(self, data: bytes) -> Tuple[int, bytes]:
        cmd = data[0]
        if cmd == Command.DAP_INFO:
            value = self.info.get(InfoID(data[1]), b"")
            return 2, bytes([cmd, len(value)]) + value
        elif cmd == Command.DAP_CONNECT:
            port = data[1] if self.connect_port is None else self.connect_port
            return 2, bytes([cmd, port])
        elif cmd == Command.DAP_SWJ_CLOCK:
            self.clock = int.from_bytes(data[1:5], 'little')
            return 5, bytes([cmd, self.clock_status])
        elif cmd == Command.DAP_SWJ_SEQUENCE:
            bit_count = data[1] or 256
            byte_count = (bit_count + 7) // 8
            self.sequences.append((bit_count, bytes(data[2:2 + byte_count])))
            return 2 + byte_count, bytes([cmd, self.sequence_status])
        elif cmd == Command.DAP_TRANSFER:
            return self._transfer(data)
        else:
            return 1, bytes([DAP_ERROR])

    def _transfer(self, data: bytes) -> Tuple[int, bytes]:
        count = data[2]
        offset = 3
        completed = 0
        ack = DAPTransferResponse.ACK_OK
        values = bytearray()
        failed = False
        for _ in range(count):
            request = data[offset]
            offset += 1
            is_ap = bool(request & AP_ACC)
            is_read = bool(request & READ)
            address = request & A32_MASK
            value = None
            if (not is_read) or (request & VALUE_MATCH):
                value = int.from_bytes(data[offset:offset + 4], 'little')
                offset += 4
            if failed:
                continue

            if self.fault_register == (is_ap, address):
                ack = DAPTransferResponse.ACK_FAULT
                failed = True
                continue

            if request & MATCH_MASK:
                self._match_mask = value
            elif is_read and (request & VALUE_MATCH):
                for _ in range(self.MATCH_RETRY):
                    if (self.target.read(is_ap, address) & self._match_mask) == value:
                        break
                else:
                    ack = DAPTransferResponse.ACK_OK | DAPTransferResponse.VALUE_MISMATCH_MASK
                    failed = True
                    continue
            elif is_read:
                values += self.target.read(is_ap, address).to_bytes(4, 'little')
            else:
                self.target.write(is_ap, address, value)
            completed += 1

        return offset, bytes([Command.DAP_TRANSFER, completed, ack]) + bytes(values)

class MockUsbProbe:
    """@brief Stands in for UsbProbe, with a MockProbe as its transport."""

    def __init__(self, fail_open: bool = False, serial_number: str = "0240000034544e45001b00028aa9001e") -> None:
        self.transport = MockProbe()
        self.interface = MOCK_INTERFACE
        self.vid = 0x0d28
        self.pid = 0x0204
        self.vendor_name = "ARM"
        self.product_name = "DAPLink CMSIS-DAP"
        self.serial_number = serial_number
        self.is_open = False
        self.open_count = 0
        self.close_count = 0
        self._fail_open = fail_open

    def open(self) -> None:
        self.open_count += 1
        if self._fail_open:
            raise CouldNotOpenError("probe is busy")
        self.is_open = True

    def close(self) -> None:
        self.close_count += 1
        self.is_open = False

class MockEndpoint:
    def __init__(self, address: int) -> None:
        self.bEndpointAddress = address

class MockInterface:
    """@brief Interface descriptor as iterated from a pyusb Configuration."""

    def __init__(self, number: int, endpoints, cls: int = 0xff, subclass: int = 0, protocol: int = 0,
            name_index: int = 0, alt: int = 0) -> None:
        self.bInterfaceNumber = number
        self.bAlternateSetting = alt
        self.bInterfaceClass = cls
        self.bInterfaceSubClass = subclass
        self.bInterfaceProtocol = protocol
        self.iInterface = name_index
        self._endpoints = [MockEndpoint(a) for a in endpoints]

    def __iter__(self):
        return iter(self._endpoints)

def hid_interface(number: int = 0, endpoints=(0x81, 0x01), alt: int = 0) -> MockInterface:
    return MockInterface(number, endpoints, cls=0x03, alt=alt)

def bulk_interface(number: int = 1, endpoints=(0x02, 0x82), name_index: int = 4, alt: int = 0) -> MockInterface:
    return MockInterface(number, endpoints, name_index=name_index, alt=alt)

## String descriptors of a composite DAPLink, by index.
DEVICE_STRINGS = {
    4: "CMSIS-DAP v2 Interface",
    5: "CDC Data",
    }
