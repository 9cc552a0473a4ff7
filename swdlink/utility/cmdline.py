# swdlink
# Copyright (c) 2015-2020 Arm Limited
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

import logging
from typing import (Any, Callable, Dict, Iterable, List, Optional, Tuple)

from ..core.options import OPTIONS_INFO

LOG = logging.getLogger(__name__)

## Level names accepted by -L.
LOG_LEVEL_NAMES = {
        'debug': logging.DEBUG,
        'info': logging.INFO,
        'warning': logging.WARNING,
        'error': logging.ERROR,
        'critical': logging.CRITICAL,
        }

def convert_frequency(value: str) -> int:
    """@brief Convert a frequency string with an optional metric suffix to Hz.
    @param value A float followed by an optional case-insensitive 'k' or 'm' and an optional
        "Hz", with no space between the number and the suffix. Surrounding whitespace is ignored.
    @exception ValueError The string is not a frequency.
    """
    value = value.strip().lower()
    if value.endswith("hz"):
        value = value[:-2]
    scale = {'k': 1000, 'm': 1000000}.get(value[-1:], 1)
    if scale != 1:
        value = value[:-1]
    return int(float(value) * scale)

def int_base_0(x: str) -> int:
    """@brief Converts a string to an int with support for base prefixes."""
    return int(x, base=0)

def _convert_bool(value: str) -> bool:
    value = value.lower()
    if value in ("true", "1", "yes", "on"):
        return True
    elif value in ("false", "0", "no", "off"):
        return False
    raise ValueError(value)

## Value converters by option type.
_TYPE_CONVERTERS: Dict[type, Callable[[str], Any]] = {
        bool: _convert_bool,
        int: int_base_0,
        float: float,
        str: str,
        }

## Options that accept more than their type's plain syntax.
_OPTION_CONVERTERS: Dict[str, Callable[[str], Any]] = {
        'frequency': convert_frequency,
        }

def _parse_option(setting: str) -> Tuple[str, Optional[str]]:
    name, sep, value = setting.partition('=')
    return name.strip().lower(), (value.strip() if sep else None)

def convert_session_options(option_list: Optional[Iterable[str]]) -> Dict[str, Any]:
    """@brief Convert -O "name=value" settings to a dict of session options.

    A boolean option given without a value is set, or cleared if its name has a "no-" prefix.
    Unknown options and values that cannot be converted are logged and skipped. Later settings
    of an option replace earlier ones.
    """
    options: Dict[str, Any] = {}
    for setting in option_list or ():
        name, value = _parse_option(setting)
        negated = (value is None) and name.startswith('no-')
        if negated:
            name = name[3:]

        info = OPTIONS_INFO.get(name)
        if info is None:
            LOG.warning("ignoring unknown session option '%s'", name)
        elif value is None:
            if info.type is bool:
                options[name] = not negated
            else:
                LOG.warning("non-boolean option '%s' requires a value", name)
        else:
            convert = _OPTION_CONVERTERS.get(name, _TYPE_CONVERTERS.get(info.type, str))
            try:
                options[name] = convert(value)
            except ValueError:
                LOG.warning("invalid value '%s' for option '%s'", value, name)
    return options

def convert_log_level_setting(setting: str) -> Tuple[List[str], int]:
    """@brief Split a -L "PATTERNS=LEVEL" argument.
    @return Tuple of the list of logger name glob patterns and the log level.
    @exception ValueError The setting is malformed or names an unknown level.
    """
    patterns, sep, level_name = setting.partition('=')
    level = LOG_LEVEL_NAMES.get(level_name.strip().lower())
    if not sep or level is None:
        raise ValueError(f"invalid log level setting '{setting}'")
    return [p.strip() for p in patterns.split(',') if p.strip()], level
