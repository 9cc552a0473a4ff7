# swdlink
# Copyright (c) 2018-2020 Arm Limited
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

import argparse
import fnmatch
import logging
import os
import prettytable
import sys
from typing import (Any, Optional, Sequence)

from . import __version__
from .core import exceptions
from .core import options
from .utility.cmdline import (
    convert_log_level_setting,
    convert_session_options,
    )
from .utility.color_log import build_color_logger
from .subcommands.base import SubcommandBase
from .subcommands.connect_cmd import ConnectSubcommand
from .subcommands.info_cmd import InfoSubcommand
from .subcommands.list_cmd import ListSubcommand

LOG = logging.getLogger("swdlink.tool")

class SWDLinkTool(SubcommandBase):
    """@brief The swdlink command line tool.

    The tool object is also the command class used when no subcommand is given, in which case it
    prints usage or the --help-options table.
    """

    HELP = "CMSIS-DAP probe access and SWD link bring-up"

    SUBCOMMANDS = [
        ConnectSubcommand,
        InfoSubcommand,
        ListSubcommand,
        ]

    def __init__(self):
        super().__init__(argparse.Namespace())
        self._parser = self.build_parser()

    def __call__(self, args: argparse.Namespace) -> "SWDLinkTool":
        return self

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(prog="swdlink", description=self.HELP)
        parser.set_defaults(command_class=self, quiet=0, verbose=0, log_level=[], options=None)
        parser.add_argument('-V', '--version', action='version', version=__version__)
        parser.add_argument('--help-options', action='store_true',
            help="Display available session options.")
        self.add_subcommands(parser)
        return parser

    def _setup_logging(self) -> None:
        """@brief Install the console log handler and apply -L settings.

        Color comes from --color, then the `SWDLINK_COLOR` environment variable, then 'auto'.
        """
        color_setting = getattr(self._args, 'color', None) or os.environ.get('SWDLINK_COLOR', 'auto')
        level = max(1, self._args.command_class.DEFAULT_LOG_LEVEL + self._get_log_level_delta())
        build_color_logger(level=level, color_setting=color_setting)

        for setting in self._args.log_level:
            try:
                patterns, level = convert_log_level_setting(setting)
            except ValueError as err:
                raise exceptions.CommandError(f"invalid --log-level argument '{setting}'") from err
            known_loggers = list(logging.root.manager.loggerDict.keys())
            for pattern in patterns:
                for name in fnmatch.filter(known_loggers, pattern):
                    LOG.debug("setting log level %s for %s", logging.getLevelName(level), name)
                    logger = logging.getLogger(name)
                    logger.setLevel(level)
                    logger.disabled = False

    def _log_tracebacks(self) -> bool:
        """@brief Whether a failure is logged with its traceback.

        True with debug logging, or when -O debug.traceback is given.
        """
        if logging.getLogger('swdlink').isEnabledFor(logging.DEBUG):
            return True
        return convert_session_options(getattr(self._args, 'options', None)).get('debug.traceback', False)

    def show_options_help(self) -> None:
        pt = self._make_table(["Option", "Type", "Default", "Description"])
        pt.max_width["Description"] = 60
        for name, info in sorted(options.OPTIONS_INFO.items()):
            default = f"0x{info.default:04x}" if name.startswith('probe.') else info.default
            pt.add_row([name, info.type.__name__, default, info.help])
        print(pt)

    def invoke(self) -> int:
        if self._args.help_options:
            self.show_options_help()
        else:
            self._parser.print_help()
        return 0

    def run(self, args: Optional[Sequence[str]] = None) -> int:
        """@brief Parse arguments and run the selected subcommand.
        @return Process exit status. Failures are logged as critical and return 1.
        """
        try:
            self._args = self._parser.parse_args(args)
            self._setup_logging()
            return self._args.command_class(self._args).invoke()
        except KeyboardInterrupt:
            return 0
        except exceptions.LinkError as err:
            LOG.critical("SWD link bring-up failed: %s", err, exc_info=self._log_tracebacks())
            return 1
        except (exceptions.Error, ValueError) as err:
            LOG.critical(err, exc_info=self._log_tracebacks())
            return 1
        except Exception as err:
            LOG.critical("Unexpected error: %s", err, exc_info=True)
            return 1

def main() -> None:
    sys.exit(SWDLinkTool().run())

if __name__ == '__main__':
    main()
