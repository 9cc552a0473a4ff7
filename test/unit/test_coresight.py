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

from swdlink.coresight import (ap, dap)

class TestDPIDR:
    def test_decode(self):
        idr = dap.decode_dpidr(0x2ba01477)
        assert idr.idr == 0x2ba01477
        assert idr.revision == 2
        assert idr.partno == 0xba
        assert idr.version == 1
        assert not idr.mindp
        assert idr.designer == 0x23b

    def test_mindp(self):
        idr = dap.decode_dpidr(0x0bc11477)
        assert idr.mindp
        assert idr.partno == 0xbc

    def test_str(self):
        assert str(dap.decode_dpidr(0x2ba01477)) == "IDR = 0x2ba01477 (v1 rev2, part 0xba, designer 0x23b)"

    def test_select_value(self):
        assert dap.select_value(0, 0xf) == 0xf0
        assert dap.select_value(1, 0) == 0x01000000
        assert dap.select_value(0x2, 0x1) == 0x02000010

    def test_constants(self):
        assert dap.ABORT_CLEAR_ERRORS == 0x1d
        assert dap.POWER_UP_REQUEST == 0x50000000
        assert dap.POWER_UP_ACK == 0xa0000000

class TestAPIDR:
    @pytest.mark.parametrize(("idr", "name", "is_ahb"), [
        (0x24770011, "AHB-AP", True),
        (0x04770031, "AHB-AP", True),
        (0x34770015, "AHB5-AP", True),
        (0x44770002, "APB-AP", False),
        (0x04770004, "AXI-AP", False),
        (0x4ba00477, "JTAG-AP", False),
        (0x00000000, None, False),
        ])
    def test_decode(self, idr, name, is_ahb):
        apidr = ap.decode_ap_idr(idr)
        assert apidr.name == name
        assert apidr.is_ahb_ap == is_ahb

    def test_fields(self):
        apidr = ap.decode_ap_idr(0x24770011)
        assert apidr.revision == 2
        assert apidr.designer == ap.AP_JEP106_ARM
        assert apidr.ap_class == ap.AP_CLASS_MEM_AP
        assert apidr.variant == 1
        assert apidr.ap_type == ap.AP_TYPE_AHB
        assert apidr.is_mem_ap

    def test_str(self):
        assert str(ap.decode_ap_idr(0x24770011)) == "IDR = 0x24770011 (AHB-AP, var1 rev2)"
        assert str(ap.decode_ap_idr(0)) == "IDR = 0x00000000 (unknown AP, var0 rev0)"

    def test_csw(self):
        assert ap.CSW_WORD_ACCESS == 0x03000042
