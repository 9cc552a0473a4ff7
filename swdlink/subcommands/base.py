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
import logging
import prettytable
from typing import (Any, Dict, List, Optional, Type)

from ..core.session import Session
from ..utility.cmdline import (
    convert_frequency,
    convert_session_options,
    int_base_0,
    )

class SubcommandBase:
    """@brief Base class for swdlink command line subcommands.

    Subclasses set NAMES and HELP, return their parsers from get_args(), and do their work in
    invoke(). Arguments that override a session option are listed in ARGUMENT_OPTIONS and are
    applied by _create_session().
    """

    NAMES: List[str] = []
    HELP: str = ""
    EPILOG: Optional[str] = None
    DEFAULT_LOG_LEVEL = logging.INFO
    SUBCOMMANDS: List[Type["SubcommandBase"]] = []

    ## Map from argument dest to the session option it overrides.
    ARGUMENT_OPTIONS: Dict[str, str] = {
        'frequency': 'frequency',
        'vid': 'probe.vid',
        'pid': 'probe.pid',
        'power_up_policy': 'swd.power_up.policy',
        }

    ## The subcommand's own parser, set by add_subcommands().
    parser: Optional[argparse.ArgumentParser] = None

    class CommonOptions:
        """@brief Parent parsers shared between subcommands."""

        LOGGING = argparse.ArgumentParser(description='logging', add_help=False)
        LOGGING_GROUP = LOGGING.add_argument_group("logging")
        LOGGING_GROUP.add_argument('-v', '--verbose', action='count', default=0,
            help="More logging. Can be repeated.")
        LOGGING_GROUP.add_argument('-q', '--quiet', action='count', default=0,
            help="Less logging. Can be repeated.")
        LOGGING_GROUP.add_argument('-L', '--log-level', action='append', metavar="LOGGERS=LEVEL",
            default=[],
            help="Set the level of loggers matching a comma-separated list of glob patterns. Level is one of "
            "critical, error, warning, info or debug. Example: -L*.trace,swdlink.coresight.*=debug")
        LOGGING_GROUP.add_argument('--color', choices=("always", "auto", "never"), default=None,
            nargs='?', const="auto", help="Control color logging. Default is auto.")

        CONFIG = argparse.ArgumentParser(description='configuration', add_help=False)
        CONFIG_GROUP = CONFIG.add_argument_group("configuration")
        CONFIG_GROUP.add_argument('-O', action='append', dest='options', metavar="OPTION=VALUE",
            help="Set a session option. See --help-options.")

        COMMON = argparse.ArgumentParser(description='common', parents=[LOGGING, CONFIG], add_help=False)

        PROBE = argparse.ArgumentParser(description='probe', add_help=False)
        PROBE_GROUP = PROBE.add_argument_group("probe selection")
        PROBE_GROUP.add_argument("--vid", default=None, type=int_base_0,
            help="USB vendor ID of the probe. Overrides the 'probe.vid' option.")
        PROBE_GROUP.add_argument("--pid", default=None, type=int_base_0,
            help="USB product ID of the probe. Overrides the 'probe.pid' option.")

        CONNECT = argparse.ArgumentParser(description='connection', parents=[PROBE], add_help=False)
        CONNECT_GROUP = CONNECT.add_argument_group("connection")
        CONNECT_GROUP.add_argument("-u", "--uid", "--probe", dest="unique_id",
            help="Select the probe by its serial number.")
        CONNECT_GROUP.add_argument("-f", "--frequency", default=None, type=convert_frequency,
            help="SWD clock frequency in Hz, with an optional K or M suffix. Examples: \"1000\", "
            "\"2.5khz\", \"10m\". Overrides the 'frequency' option.")

    @classmethod
    def add_subcommands(cls, parser: argparse.ArgumentParser) -> None:
        """@brief Add a subparser for each class in SUBCOMMANDS."""
        if not cls.SUBCOMMANDS:
            return
        subparsers = parser.add_subparsers(title="subcommands", metavar="", dest='cmd')
        for subcmd_class in cls.SUBCOMMANDS:
            parsers = subcmd_class.get_args()
            subcmd_class.parser = parsers[-1]
            subparser = subparsers.add_parser(subcmd_class.NAMES[0],
                    aliases=subcmd_class.NAMES[1:],
                    parents=parsers,
                    help=subcmd_class.HELP,
                    epilog=subcmd_class.EPILOG)
            subparser.set_defaults(command_class=subcmd_class)

    @classmethod
    def get_args(cls) -> List[argparse.ArgumentParser]:
        """@brief Build the subcommand's argument parsers.
        @return List of parent parsers. The last one must be the subcommand's own parser.
        """
        raise NotImplementedError()

    def __init__(self, args: argparse.Namespace):
        self._args = args

    def invoke(self) -> int:
        """@brief Run the subcommand.
        @return Process exit status.
        """
        if self.parser is not None:
            self.parser.print_help()
        return 0

    def _get_log_level_delta(self) -> int:
        return (self._args.quiet - self._args.verbose) * 10

    def _make_table(self, fields: List[str], header: bool = True) -> prettytable.PrettyTable:
        """@brief Left aligned table with only a rule under the header."""
        pt = prettytable.PrettyTable(fields)
        pt.align = 'l'
        pt.header = header and not getattr(self._args, 'no_header', False)
        pt.border = True
        pt.hrules = prettytable.HEADER
        pt.vrules = prettytable.NONE
        return pt

    def _argument_option_overrides(self) -> Dict[str, Any]:
        """@brief Session option overrides from explicit arguments, as Session keyword arguments."""
        return {option.replace('.', '__'): getattr(self._args, dest, None)
                for dest, option in self.ARGUMENT_OPTIONS.items()}

    def _create_session(self, auto_open: bool = True) -> Session:
        """@brief Create a Session from the parsed arguments.

        Explicit arguments such as --frequency take precedence over -O options. Tracebacks
        default to on when debug logging is enabled.
        """
        return Session(
                unique_id=getattr(self._args, 'unique_id', None),
                auto_open=auto_open,
                options=convert_session_options(self._args.options),
                option_defaults={
                    'debug.traceback': logging.getLogger('swdlink').isEnabledFor(logging.DEBUG),
                    },
                **self._argument_option_overrides(),
                )
