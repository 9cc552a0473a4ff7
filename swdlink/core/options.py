# swdlink
# Copyright (c) 2018-2021 Arm Limited
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

from typing import (Any, Dict, List, NamedTuple, Tuple, Union)

class OptionInfo(NamedTuple):
    name: str
    type: Union[type, Tuple[type, ...]]
    default: Any
    help: str

## @brief Definitions of the builtin options.
BUILTIN_OPTIONS: List[OptionInfo] = [
    OptionInfo('cmsis_dap.packet_size', int, 64,
        "Size in bytes of CMSIS-DAP command and response packets. Full speed probes use 64."),
    OptionInfo('cmsis_dap.prefer_v1', bool, False,
        "If a device provides both CMSIS-DAP v1 and v2 interfaces, use the v1 interface in preference of v2. "
        "Normal behaviour is to prefer the v2 interface. This option is primarily intended for testing."),
    OptionInfo('cmsis_dap.use_hid_out_ep', bool, False,
        "Send CMSIS-DAP v1 commands on the HID interrupt OUT endpoint if the interface has one. By default "
        "commands are sent with SET_REPORT control requests."),
    OptionInfo('debug.traceback', bool, False,
        "Print tracebacks for exceptions."),
    OptionInfo('frequency', int, 1000000,
        "SWD clock frequency in Hz."),
    OptionInfo('probe.pid', int, 0x0204,
        "USB product ID of the debug probe."),
    OptionInfo('probe.vid', int, 0x0d28,
        "USB vendor ID of the debug probe."),
    OptionInfo('swd.power_up.policy', str, "poll",
        "How the debug and system power-up acknowledge is checked. One of 'single' (read CTRL/STAT once and "
        "only warn if unacknowledged), 'poll' (read CTRL/STAT until acknowledged or timed out), or 'match' "
        "(have the probe wait for the acknowledge bits with a value match read)."),
    OptionInfo('swd.power_up.timeout', float, 5.0,
        "Timeout in seconds for the 'poll' power-up policy."),
    OptionInfo('usb.timeout', float, 5.0,
        "Timeout in seconds for a single USB transfer."),
    ]

## @brief The runtime dictionary of options.
OPTIONS_INFO: Dict[str, OptionInfo] = {}

def add_option_set(options: List[OptionInfo]) -> None:
    """@brief Merge a list of OptionInfo objects into OPTIONS_INFO."""
    OPTIONS_INFO.update({oi.name: oi for oi in options})

# Start with only builtin options.
add_option_set(BUILTIN_OPTIONS)
