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
import usb.core

from swdlink.core.exceptions import InterfaceNotFoundError
from swdlink.probe.pydapaccess.interface.common import (
    ProbeInterface,
    ProtocolGeneration,
    generate_device_unique_id,
    select_interface,
    )

from .mockprobe import (
    DEVICE_STRINGS,
    MockInterface,
    bulk_interface,
    hid_interface,
    )

def get_string(index):
    return DEVICE_STRINGS[index]

class TestSelectInterface:
    def test_hid_only(self):
        selected = select_interface([hid_interface()], get_string)
        assert selected == ProbeInterface(0, 0x81, 0, ProtocolGeneration.LEGACY)

    def test_hid_out_endpoint(self):
        selected = select_interface([hid_interface()], get_string, use_hid_out_ep=True)
        assert selected == ProbeInterface(0, 0x81, 0x01, ProtocolGeneration.LEGACY)

    def test_hid_without_out_endpoint(self):
        selected = select_interface([hid_interface(endpoints=(0x81,))], get_string, use_hid_out_ep=True)
        assert selected.ep_out == 0

    def test_v2_preferred(self):
        selected = select_interface([hid_interface(), bulk_interface()], get_string)
        assert selected == ProbeInterface(1, 0x82, 0x02, ProtocolGeneration.VENDOR_BULK)

    def test_v2_only(self):
        selected = select_interface([bulk_interface(number=0)], get_string)
        assert selected == ProbeInterface(0, 0x82, 0x02, ProtocolGeneration.VENDOR_BULK)

    def test_prefer_v1(self):
        selected = select_interface([hid_interface(), bulk_interface()], get_string, prefer_v2=False)
        assert selected.generation is ProtocolGeneration.LEGACY

    def test_v2_missing_out_endpoint(self):
        selected = select_interface([hid_interface(), bulk_interface(endpoints=(0x82,))], get_string)
        assert selected == ProbeInterface(0, 0x81, 0, ProtocolGeneration.LEGACY)

    def test_v2_missing_in_endpoint(self):
        selected = select_interface([hid_interface(), bulk_interface(endpoints=(0x02,))], get_string)
        assert selected.generation is ProtocolGeneration.LEGACY

    def test_v2_incomplete_then_complete(self):
        config = [hid_interface(), bulk_interface(number=1, endpoints=(0x82,)), bulk_interface(number=2, endpoints=(0x03, 0x83))]
        selected = select_interface(config, get_string)
        assert selected == ProbeInterface(2, 0x83, 0x03, ProtocolGeneration.VENDOR_BULK)

    def test_other_name_ignored(self):
        selected = select_interface([hid_interface(), bulk_interface(name_index=5)], get_string)
        assert selected.generation is ProtocolGeneration.LEGACY

    def test_unnamed_ignored(self):
        selected = select_interface([hid_interface(), bulk_interface(name_index=0)], get_string)
        assert selected.generation is ProtocolGeneration.LEGACY

    def test_corrupt_name_ignored(self):
        def bad_string(index):
            raise UnicodeDecodeError('utf-16-le', b'\xff', 0, 1, "invalid")
        selected = select_interface([hid_interface(), bulk_interface()], bad_string)
        assert selected.generation is ProtocolGeneration.LEGACY

    def test_name_read_error_ignored(self):
        def bad_string(index):
            raise usb.core.USBError("pipe error")
        selected = select_interface([hid_interface(), bulk_interface()], bad_string)
        assert selected.generation is ProtocolGeneration.LEGACY

    def test_alternate_settings_ignored(self):
        with pytest.raises(InterfaceNotFoundError):
            select_interface([hid_interface(alt=1), bulk_interface(alt=1)], get_string)

    def test_not_found(self):
        with pytest.raises(InterfaceNotFoundError):
            select_interface([MockInterface(0, (0x81,))], get_string)

    def test_str(self):
        assert str(ProbeInterface(1, 0x82, 0x02, ProtocolGeneration.VENDOR_BULK)) \
                == "interface 1 (vendor_bulk, in 0x82, out 0x02)"

class TestUniqueId:
    def test_stable(self):
        assert generate_device_unique_id(0x0d28, 0x0204, 1, 5) == generate_device_unique_id(0x0d28, 0x0204, 1, 5)

    def test_location(self):
        assert generate_device_unique_id(0x0d28, 0x0204, 1, 5) != generate_device_unique_id(0x0d28, 0x0204, 1, 6)
