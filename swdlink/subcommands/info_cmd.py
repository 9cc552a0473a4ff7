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

import argparse
from typing import List
import logging

from .base import SubcommandBase
from ..probe.pydapaccess.cmsis_dap_core import Capabilities

LOG = logging.getLogger(__name__)

class InfoSubcommand(SubcommandBase):
    """@brief `swdlink info` subcommand."""

    NAMES = ['info']
    HELP = "Show identification and capabilities reported by a probe."

    ## Names of capability bits, in bit order.
    CAPABILITY_NAMES = [
        (Capabilities.SWD, "SWD"),
        (Capabilities.JTAG, "JTAG"),
        (Capabilities.SWO_UART, "SWO UART"),
        (Capabilities.SWO_MANCHESTER, "SWO Manchester"),
        (Capabilities.ATOMIC_COMMANDS, "atomic commands"),
        (Capabilities.DAP_SWD_SEQUENCE, "SWD sequence"),
        ]

    @classmethod
    def get_args(cls) -> List[argparse.ArgumentParser]:
        """@brief Add this subcommand to the subparsers object."""
        info_parser = argparse.ArgumentParser(description=cls.HELP, add_help=False)
        return [cls.CommonOptions.COMMON, cls.CommonOptions.CONNECT, info_parser]

    def _format_capabilities(self, capabilities) -> str:
        if capabilities is None:
            return "-"
        names = [name for mask, name in self.CAPABILITY_NAMES if capabilities & mask]
        return f"0x{capabilities:02x} ({', '.join(names) or 'none'})"

    def invoke(self) -> int:
        """@brief Handle 'info' subcommand."""
        with self._create_session() as session:
            info = session.read_probe_info()

        pt = self._make_table(["Item", "Value"], header=False)
        pt.add_row(["Vendor", info.vendor or "-"])
        pt.add_row(["Product", info.product or "-"])
        pt.add_row(["Serial number", info.serial_number or "-"])
        pt.add_row(["Firmware version", info.firmware_version or "-"])
        pt.add_row(["Product firmware version", info.product_firmware_version or "-"])
        pt.add_row(["Capabilities", self._format_capabilities(info.capabilities)])
        pt.add_row(["Packet count", info.max_packet_count if info.max_packet_count is not None else "-"])
        pt.add_row(["Packet size", info.max_packet_size if info.max_packet_size is not None else "-"])
        print(pt)

        if not info.supports_swd:
            LOG.warning("Probe does not report SWD support")
        return 0
