# swdlink
# Copyright (c) 2006-2021 Arm Limited
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

import usb.core

from ....core.exceptions import (
    TransportError,
    TransportTimeoutError,
    )
from ....utility.hex import format_hex_bytes

LOG = logging.getLogger(__name__)
TRACE = LOG.getChild("trace")
TRACE.setLevel(logging.CRITICAL)

# HID class requests used when an interrupt endpoint is not available.
HID_SET_REPORT_REQUEST_TYPE = 0x21 # Host to device, class, interface recipient
HID_SET_REPORT = 0x09
HID_OUTPUT_REPORT = 0x0200
HID_GET_REPORT_REQUEST_TYPE = 0xa1 # Device to host, class, interface recipient
HID_GET_REPORT = 0x01
HID_INPUT_REPORT = 0x0100

class UsbTransport:
    """@brief Blocking packet transfers with a CMSIS-DAP probe.

    Each call performs exactly one USB transfer and waits at most `timeout` seconds for it. When
    an endpoint address of 0 is passed, the packet is transferred as a HID report over the default
    control pipe.
    """

    DEFAULT_TIMEOUT = 5.0

    def __init__(self, device, timeout: float = DEFAULT_TIMEOUT) -> None:
        """@brief Constructor.
        @param device An opened pyusb Device.
        @param timeout Transfer timeout in seconds.
        """
        self._dev = device
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def _timeout_ms(self) -> int:
        return int(self._timeout * 1000)

    def write(self, interface_number: int, out_ep: int, data: bytes) -> int:
        """@brief Send one packet.
        @return Number of bytes written.
        @exception TransportTimeoutError
        @exception TransportError
        """
        if TRACE.isEnabledFor(logging.DEBUG):
            TRACE.debug("  USB OUT> (%d) %s", len(data), format_hex_bytes(bytes(data).rstrip(b'\x00')))

        try:
            if out_ep == 0:
                return self._dev.ctrl_transfer(HID_SET_REPORT_REQUEST_TYPE, HID_SET_REPORT,
                        HID_OUTPUT_REPORT, interface_number, data, timeout=self._timeout_ms)
            else:
                return self._dev.write(out_ep, data, timeout=self._timeout_ms)
        except usb.core.USBTimeoutError as exc:
            raise TransportTimeoutError(f"timeout writing to endpoint 0x{out_ep:02x}") from exc
        except usb.core.USBError as exc:
            raise TransportError(f"error writing to endpoint 0x{out_ep:02x}: {exc}") from exc

    def read(self, interface_number: int, in_ep: int, buffer: bytearray) -> int:
        """@brief Receive one packet into _buffer_.

        At most len(buffer) bytes are received.

        @return Number of bytes read.
        @exception TransportTimeoutError
        @exception TransportError
        """
        try:
            if in_ep == 0:
                data = self._dev.ctrl_transfer(HID_GET_REPORT_REQUEST_TYPE, HID_GET_REPORT,
                        HID_INPUT_REPORT, interface_number, len(buffer), timeout=self._timeout_ms)
            else:
                data = self._dev.read(in_ep, len(buffer), timeout=self._timeout_ms)
        except usb.core.USBTimeoutError as exc:
            raise TransportTimeoutError(f"timeout reading from endpoint 0x{in_ep:02x}") from exc
        except usb.core.USBError as exc:
            raise TransportError(f"error reading from endpoint 0x{in_ep:02x}: {exc}") from exc

        data = bytes(data)[:len(buffer)]
        buffer[:len(data)] = data

        if TRACE.isEnabledFor(logging.DEBUG):
            # Strip off trailing zero bytes to reduce clutter.
            TRACE.debug("  USB IN < (%d) %s", len(data), format_hex_bytes(data.rstrip(b'\x00')))

        return len(data)
