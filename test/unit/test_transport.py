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

import pytest
from unittest.mock import Mock
import usb.core

from swdlink.core.exceptions import (
    TransportError,
    TransportTimeoutError,
    )
from swdlink.probe.pydapaccess.interface.transport import UsbTransport

@pytest.fixture(scope='function')
def device():
    return Mock()

@pytest.fixture(scope='function')
def transport(device):
    return UsbTransport(device, timeout=2.5)

class TestUsbTransport:
    def test_timeout(self, transport):
        assert transport.timeout == 2.5
        assert UsbTransport(Mock()).timeout == UsbTransport.DEFAULT_TIMEOUT

    def test_write_endpoint(self, device, transport):
        device.write.return_value = 64
        assert transport.write(1, 0x02, b"\x7f" + bytes(63)) == 64
        device.write.assert_called_once_with(0x02, b"\x7f" + bytes(63), timeout=2500)
        device.ctrl_transfer.assert_not_called()

    def test_write_set_report(self, device, transport):
        device.ctrl_transfer.return_value = 64
        transport.write(0, 0, bytes(64))
        device.ctrl_transfer.assert_called_once_with(0x21, 0x09, 0x0200, 0, bytes(64), timeout=2500)
        device.write.assert_not_called()

    def test_read_endpoint(self, device, transport):
        device.read.return_value = [0x7f, 0x01, 0x02, 0x01]
        buf = bytearray(64)
        assert transport.read(1, 0x82, buf) == 4
        assert buf[:4] == bytearray([0x7f, 0x01, 0x02, 0x01])
        assert buf[4:] == bytearray(60)
        device.read.assert_called_once_with(0x82, 64, timeout=2500)

    def test_read_get_report(self, device, transport):
        device.ctrl_transfer.return_value = bytes([0x7f, 0x00])
        buf = bytearray(64)
        assert transport.read(0, 0, buf) == 2
        device.ctrl_transfer.assert_called_once_with(0xa1, 0x01, 0x0100, 0, 64, timeout=2500)

    def test_read_longer_than_buffer(self, device, transport):
        device.read.return_value = bytes(range(10))
        buf = bytearray(4)
        assert transport.read(1, 0x82, buf) == 4
        assert buf == bytearray([0, 1, 2, 3])

    def test_write_timeout(self, device, transport):
        device.write.side_effect = usb.core.USBTimeoutError("timeout")
        with pytest.raises(TransportTimeoutError):
            transport.write(1, 0x02, bytes(64))

    def test_read_timeout(self, device, transport):
        device.read.side_effect = usb.core.USBTimeoutError("timeout")
        with pytest.raises(TransportTimeoutError):
            transport.read(1, 0x82, bytearray(64))

    def test_write_error(self, device, transport):
        device.ctrl_transfer.side_effect = usb.core.USBError("pipe error")
        with pytest.raises(TransportError) as excinfo:
            transport.write(0, 0, bytes(64))
        assert not isinstance(excinfo.value, TransportTimeoutError)
        assert isinstance(excinfo.value.__cause__, usb.core.USBError)

    def test_read_error(self, device, transport):
        device.read.side_effect = usb.core.USBError("no device")
        with pytest.raises(TransportError):
            transport.read(1, 0x82, bytearray(64))
