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
from ..utility.notification import Notification

LOG = logging.getLogger(__name__)

class ConnectSubcommand(SubcommandBase):
    """@brief `swdlink connect` subcommand."""

    NAMES = ['connect']
    HELP = "Bring up the SWD link to a target and read its identification registers."

    @classmethod
    def get_args(cls) -> List[argparse.ArgumentParser]:
        """@brief Add this subcommand to the subparsers object."""
        connect_parser = argparse.ArgumentParser(description=cls.HELP, add_help=False)

        connect_options = connect_parser.add_argument_group("connect options")
        connect_options.add_argument("--power-up", dest="power_up_policy", choices=("single", "poll", "match"),
            default=None,
            help="How the debug power-up acknowledge is checked. Overrides the 'swd.power_up.policy' option.")

        return [cls.CommonOptions.COMMON, cls.CommonOptions.CONNECT, connect_parser]

    def _on_state_changed(self, note: Notification) -> None:
        LOG.debug("reached %s", note.data.name)

    def invoke(self) -> int:
        """@brief Handle 'connect' subcommand."""
        with self._create_session() as session:
            result = session.bring_up(self._on_state_changed)

        pt = self._make_table(["Register", "Value", "Description"])
        pt.add_row(["IDCODE", f"0x{result.idcode:08x}", str(result.dpidr)])
        pt.add_row(["CTRL/STAT", f"0x{result.ctrl_stat:08x}", ""])
        pt.add_row(["AP_IDR", f"0x{result.ap_idr:08x}", str(result.apidr)])
        pt.add_row(["CPUID", f"0x{result.cpuid:08x}", ""])
        print(pt)
        return 0
