# swdlink
# Copyright (c) 2015-2020 Arm Limited
# Copyright (c) 2021 Chris Reed
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

from typing import (NamedTuple, Optional)

## Offset of IDR register in an APv1.
AP_IDR = 0xFC

## Register bank holding the IDR.
AP_IDR_BANK = 0xF

# AP IDR bitfields:
# [31:28] Revision
# [27:24] JEP106 continuation (0x4 for ARM)
# [23:17] JEP106 vendor ID (0x3B for ARM)
# [16:13] Class (0b1000=Mem-AP)
# [12:8]  Reserved
# [7:4]   AP Variant (non-zero for JTAG-AP)
# [3:0]   AP Type
AP_IDR_REVISION_MASK = 0xf0000000
AP_IDR_REVISION_SHIFT = 28
AP_IDR_JEP106_MASK = 0x0ffe0000
AP_IDR_JEP106_SHIFT = 17
AP_IDR_CLASS_MASK = 0x0001e000
AP_IDR_CLASS_SHIFT = 13
AP_IDR_VARIANT_MASK = 0x000000f0
AP_IDR_VARIANT_SHIFT = 4
AP_IDR_TYPE_MASK = 0x0000000f

# MEM-AP register addresses
MEM_AP_CSW = 0x00
MEM_AP_TAR = 0x04
MEM_AP_DRW = 0x0C

# AP Control and Status Word definitions
CSW_SIZE32   =  0x00000002
CSW_DEVICEEN =  0x00000040
CSW_HPROT    =  0x0f000000
CSW_HPROT_PRIVILEGED = 0x02000000
CSW_HPROT_DATA = 0x01000000

## 32-bit accesses without address increment, privileged data, debug enabled.
CSW_WORD_ACCESS = CSW_HPROT_PRIVILEGED | CSW_HPROT_DATA | CSW_DEVICEEN | CSW_SIZE32

## Address of the Cortex-M CPUID register in the System Control Block.
CPUID_ADDRESS = 0xE000ED00

AP_JEP106_ARM = 0x23b

# AP classes
AP_CLASS_JTAG_AP = 0x0
AP_CLASS_COM_AP = 0x1 # SDC-600 (Chaucer)
AP_CLASS_MEM_AP = 0x8 # AHB-AP, APB-AP, AXI-AP

# MEM-AP type constants
AP_TYPE_AHB = 0x1
AP_TYPE_APB = 0x2
AP_TYPE_AXI = 0x4
AP_TYPE_AHB5 = 0x5
AP_TYPE_APB4 = 0x6
AP_TYPE_AXI5 = 0x7
AP_TYPE_AHB5_HPROT = 0x8

## Names of MEM-AP bus types.
MEM_AP_TYPE_NAMES = {
    AP_TYPE_AHB: "AHB-AP",
    AP_TYPE_APB: "APB-AP",
    AP_TYPE_AXI: "AXI-AP",
    AP_TYPE_AHB5: "AHB5-AP",
    AP_TYPE_APB4: "APB4-AP",
    AP_TYPE_AXI5: "AXI5-AP",
    AP_TYPE_AHB5_HPROT: "AHB5-AP",
    }

AHB_AP_TYPES = (AP_TYPE_AHB, AP_TYPE_AHB5, AP_TYPE_AHB5_HPROT)

class APIDR(NamedTuple):
    """@brief Fields of an AP IDR register."""
    idr: int
    revision: int
    designer: int
    ap_class: int
    variant: int
    ap_type: int

    @property
    def is_mem_ap(self) -> bool:
        return self.ap_class == AP_CLASS_MEM_AP

    @property
    def is_ahb_ap(self) -> bool:
        return self.is_mem_ap and self.ap_type in AHB_AP_TYPES

    @property
    def name(self) -> Optional[str]:
        if self.is_mem_ap:
            return MEM_AP_TYPE_NAMES.get(self.ap_type, "MEM-AP")
        elif self.ap_class == AP_CLASS_JTAG_AP and self.variant != 0:
            return "JTAG-AP"
        elif self.ap_class == AP_CLASS_COM_AP:
            return "COM-AP"
        return None

    def __str__(self) -> str:
        return f"IDR = 0x{self.idr:08x} ({self.name or 'unknown AP'}, var{self.variant} rev{self.revision})"

def decode_ap_idr(idr: int) -> APIDR:
    """@brief Split an AP IDR value into its fields."""
    return APIDR(
            idr=idr,
            revision=(idr & AP_IDR_REVISION_MASK) >> AP_IDR_REVISION_SHIFT,
            designer=(idr & AP_IDR_JEP106_MASK) >> AP_IDR_JEP106_SHIFT,
            ap_class=(idr & AP_IDR_CLASS_MASK) >> AP_IDR_CLASS_SHIFT,
            variant=(idr & AP_IDR_VARIANT_MASK) >> AP_IDR_VARIANT_SHIFT,
            ap_type=idr & AP_IDR_TYPE_MASK,
            )
