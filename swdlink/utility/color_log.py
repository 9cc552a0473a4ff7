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

import colorama
from colorama import (Fore, Style)
import logging
import sys
from typing import (Dict, IO, NamedTuple, Optional)

class LevelStyle(NamedTuple):
    """@brief Colors for the level letter and the message of one log level."""
    level: str
    message: str

class ColorFormatter(logging.Formatter):
    """@brief Log formatter for the swdlink console.

    Each line is the milliseconds since startup, the first letter of the level name, the message,
    and the source module. Records from the packet trace loggers (named `*.trace`) are dimmed and
    tagged with the full logger name instead of the module, so that packet dumps from the
    transport and the batch engine can be told apart.
    """

    FORMAT = "{_time}{relativeCreated:07.0f}{_reset} {_level}{levelname:.1s}{_reset} {_message}{message} {_dim}[{_source}]{_reset}"

    STYLES: Dict[str, LevelStyle] = {
            'CRITICAL': LevelStyle(Style.BRIGHT + Fore.LIGHTRED_EX, Fore.LIGHTRED_EX),
            'ERROR': LevelStyle(Fore.LIGHTRED_EX, Fore.RED),
            'WARNING': LevelStyle(Fore.LIGHTYELLOW_EX, Fore.YELLOW),
            'INFO': LevelStyle(Fore.CYAN, ''),
            'DEBUG': LevelStyle(Style.DIM, Style.DIM + Fore.LIGHTWHITE_EX),
        }

    TRACE_SUFFIX = ".trace"

    def __init__(self, use_color: bool) -> None:
        super().__init__(self.FORMAT, style='{')
        self._use_color = use_color

    def _color(self, code: str) -> str:
        return code if self._use_color else ""

    def format(self, record) -> str:
        # Exception and stack text is appended dimmed after the formatted line.
        exc_info, record.exc_info = record.exc_info, None
        stack_info, record.stack_info = record.stack_info, None

        is_trace = record.name.endswith(self.TRACE_SUFFIX)
        style = self.STYLES.get(record.levelname, LevelStyle('', ''))
        record._time = self._color(Fore.BLUE)
        record._level = self._color(style.level)
        record._message = self._color(Style.DIM if is_trace else style.message)
        record._dim = self._color(Style.DIM)
        record._reset = self._color(Style.RESET_ALL)
        record._source = record.name if is_trace else record.module
        record.message = record.getMessage()

        log_msg = super().format(record)

        for extra in (exc_info and self.formatException(exc_info), stack_info and self.formatStack(stack_info)):
            if extra:
                log_msg += "\n" + record._dim + extra + record._reset
        return log_msg

def build_color_logger(
            level: int = logging.INFO,
            color_setting: str = 'auto',
            stream: Optional[IO[str]] = None,
            is_tty: Optional[bool] = None,
        ) -> logging.Logger:
    """@brief Install a ColorFormatter console handler on the root logger.

    @param level Log level of the root logger.
    @param color_setting One of 'auto', 'always', or 'never'. 'auto' enables color if `is_tty` is True.
    @param stream The stream to which the log will be output. The default is stderr.
    @param is_tty Whether the output is a terminal. If not provided, both `sys.stdout` and
        `sys.stderr` must be ttys for 'auto' to enable color.
    """
    if stream is None:
        stream = sys.stderr
    if is_tty is None:
        is_tty = all(getattr(s, 'isatty', lambda: False)() for s in (sys.stdout, sys.stderr))
    use_color = (color_setting == "always") or (color_setting == "auto" and is_tty)

    colorama.init(strip=(not use_color))

    console = logging.StreamHandler(stream)
    console.setFormatter(ColorFormatter(use_color))

    root_logger = logging.getLogger()
    root_logger.addHandler(console)
    root_logger.setLevel(level)
    return root_logger
