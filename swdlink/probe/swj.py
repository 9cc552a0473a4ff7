# swdlink
# Copyright (c) 2020 Arm Limited
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

from .pydapaccess.batch import RawSequence

## Deprecated ADIv5.0 SWJ-DP JTAG to SWD select code, sent LSB first.
JTAG_TO_SWD_SELECT = 0xe79e

## SWDIO/TMS high cycles that make up a line reset. At least 50 are required.
LINE_RESET_HIGH_CYCLES = 52

## SWDIO/TMS low cycles sent after a line reset. At least 2 are required.
LINE_RESET_IDLE_CYCLES = 4

def line_reset() -> RawSequence:
    """@brief SWD line reset followed by idle cycles.

    Sends 52 cycles with SWDIO high, then 4 cycles low so the next SWD request starts from idle.
    """
    return RawSequence(LINE_RESET_HIGH_CYCLES + LINE_RESET_IDLE_CYCLES,
            (1 << LINE_RESET_HIGH_CYCLES) - 1)

def jtag_to_swd() -> RawSequence:
    """@brief Switch an SWJ-DP from JTAG to SWD.

    Sends 56 cycles with SWDIO/TMS high to put either protocol into reset, then the 16-bit JTAG to
    SWD select code 0xE79E. The result is 72 bits, `FF FF FF FF FF FF FF 9E E7` on the wire.
    """
    return RawSequence(72, (JTAG_TO_SWD_SELECT << 56) | ((1 << 56) - 1))
