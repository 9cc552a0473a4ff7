# swdlink
# Copyright (c) 2015-2020 Arm Limited
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

from typing import NamedTuple

# DP register addresses.
DP_IDR = 0x00 # read-only
DP_ABORT = 0x00 # write-only
DP_CTRL_STAT = 0x04 # read-write
DP_SELECT = 0x8 # write-only
DP_RDBUFF = 0xC # read-only

ABORT_DAPABORT = 0x00000001
ABORT_STKCMPCLR = 0x00000002
ABORT_STKERRCLR = 0x00000004
ABORT_WDERRCLR = 0x00000008
ABORT_ORUNERRCLR = 0x00000010

## Abort any AP transaction and clear the sticky error, write data error and overrun flags.
ABORT_CLEAR_ERRORS = ABORT_DAPABORT | ABORT_STKERRCLR | ABORT_WDERRCLR | ABORT_ORUNERRCLR

# DP Control / Status Register bit definitions
CTRLSTAT_ORUNDETECT = 0x00000001
CTRLSTAT_STICKYORUN = 0x00000002
CTRLSTAT_STICKYCMP = 0x00000010
CTRLSTAT_STICKYERR = 0x00000020
CTRLSTAT_READOK = 0x00000040
CTRLSTAT_WDATAERR = 0x00000080

# DP SELECT register fields.
SELECT_APSEL_SHIFT = 24
SELECT_APBANKSEL_MASK = 0x000000f0
SELECT_DPBANKSEL_MASK = 0x0000000f

DPIDR_REVISION_MASK = 0xf0000000
DPIDR_REVISION_SHIFT = 28
DPIDR_PARTNO_MASK = 0x0ff00000
DPIDR_PARTNO_SHIFT = 20
DPIDR_MIN_MASK = 0x00010000
DPIDR_VERSION_MASK = 0x0000f000
DPIDR_VERSION_SHIFT = 12
DPIDR_DESIGNER_MASK = 0x00000ffe
DPIDR_DESIGNER_SHIFT = 1

CSYSPWRUPACK = 0x80000000
CDBGPWRUPACK = 0x20000000
CSYSPWRUPREQ = 0x40000000
CDBGPWRUPREQ = 0x10000000

POWER_UP_REQUEST = CSYSPWRUPREQ | CDBGPWRUPREQ
POWER_UP_ACK = CSYSPWRUPACK | CDBGPWRUPACK

## Arbitrary 5 second timeout for DP power up requests.
DP_POWER_REQUEST_TIMEOUT = 5.0

## @brief Class to hold fields from DP IDR register.
class DPIDR(NamedTuple):
    idr: int
    partno: int
    version: int
    revision: int
    mindp: bool
    designer: int

    def __str__(self) -> str:
        return (f"IDR = 0x{self.idr:08x} (v{self.version}{' MINDP' if self.mindp else ''} "
                f"rev{self.revision}, part 0x{self.partno:02x}, designer 0x{self.designer:03x})")

def decode_dpidr(dpidr: int) -> DPIDR:
    """@brief Split a DP IDR (IDCODE) value into its fields."""
    return DPIDR(
            idr=dpidr,
            partno=(dpidr & DPIDR_PARTNO_MASK) >> DPIDR_PARTNO_SHIFT,
            version=(dpidr & DPIDR_VERSION_MASK) >> DPIDR_VERSION_SHIFT,
            revision=(dpidr & DPIDR_REVISION_MASK) >> DPIDR_REVISION_SHIFT,
            mindp=(dpidr & DPIDR_MIN_MASK) != 0,
            designer=(dpidr & DPIDR_DESIGNER_MASK) >> DPIDR_DESIGNER_SHIFT,
            )

def select_value(apsel: int, apbank: int) -> int:
    """@brief DP SELECT value for an AP number and AP register bank."""
    return ((apsel & 0xff) << SELECT_APSEL_SHIFT) | ((apbank << 4) & SELECT_APBANKSEL_MASK)
