# swdlink
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

import argparse
from typing import List
import logging

from .base import SubcommandBase
from ..probe.pydapaccess.interface.pyusb_backend import UsbProbe

LOG = logging.getLogger(__name__)

class ListSubcommand(SubcommandBase):
    """@brief `swdlink list` subcommand."""

    NAMES = ['list']
    HELP = "List connected CMSIS-DAP probes."

    @classmethod
    def get_args(cls) -> List[argparse.ArgumentParser]:
        """@brief Add this subcommand to the subparsers object."""
        list_parser = argparse.ArgumentParser(description=cls.HELP, add_help=False)

        list_options = list_parser.add_argument_group('list options')
        list_options.add_argument('-H', '--no-header', action='store_true',
            help="Don't print a table header.")

        return [cls.CommonOptions.COMMON, cls.CommonOptions.PROBE, list_parser]

    def invoke(self) -> int:
        """@brief Handle 'list' subcommand."""
        # Create a session with no probe to resolve options.
        session = self._create_session(auto_open=False)
        vid = session.options.get('probe.vid')
        pid = session.options.get('probe.pid')

        probes = UsbProbe.get_all_connected_probes(vid, pid)
        if not probes:
            print(f"No available debug probes are connected (VID={vid:04x} PID={pid:04x})")
            return 0

        pt = self._make_table(["#", "Probe", "Unique ID", "VID:PID"])
        for index, probe in enumerate(probes):
            pt.add_row([
                        index,
                        f"{probe.vendor_name} {probe.product_name}",
                        probe.serial_number,
                        f"{probe.vid:04x}:{probe.pid:04x}",
                        ])
        print(pt)
        return 0
