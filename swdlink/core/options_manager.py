# swdlink
# Copyright (c) 2018-2019 Arm Limited
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
from functools import partial
from typing import (Any, Callable, Dict, List, Mapping, NamedTuple, Optional)

from .options import OPTIONS_INFO
from ..utility.notification import Notifier

LOG = logging.getLogger(__name__)

class OptionChangeInfo(NamedTuple):
    """@brief Data for an option value change notification.

    Sent as the data attribute of the notification delivered to subscribers when an option's
    effective value changes. If the option was not previously set, `old_value` is its default.
    """
    new_value: Any
    old_value: Any

class OptionsManager(Notifier):
    """@brief Layered option values for a session.

    When an option is read, the highest priority layer that holds a value for it wins. The default
    from OPTIONS_INFO acts as a layer with infinitely low priority. The notification events are the
    option names themselves, and the notification data is an OptionChangeInfo.

    Values whose type does not match the option's declared type are dropped with a warning, so a
    bad value from the command line never reaches the protocol code.
    """

    def __init__(self) -> None:
        super().__init__()
        self._layers: List[Dict[str, Any]] = [{}]

    def _update_layers(self, new_options: Optional[Mapping[str, Any]],
            update_operation: Callable[[Dict[str, Any]], None]) -> None:
        if new_options is None:
            return
        filtered_options = self._convert_options(new_options)
        previous_values = {name: self.get(name) for name in filtered_options.keys()}
        update_operation(filtered_options)
        new_values = {name: self.get(name) for name in filtered_options.keys()}
        self._notify_changes(previous_values, new_values)

    def add_front(self, new_options: Optional[Mapping[str, Any]]) -> None:
        """@brief Add a new highest priority layer of option values."""
        self._update_layers(new_options, partial(self._layers.insert, 0))

    def add_back(self, new_options: Optional[Mapping[str, Any]]) -> None:
        """@brief Add a new lowest priority layer of option values."""
        self._update_layers(new_options, self._layers.append)

    def _convert_options(self, new_options: Mapping[str, Any]) -> Dict[str, Any]:
        """@brief Prepare a dictionary of options for use by the manager.

        1. Strip entries with a value of None.
        2. Replace double-underscores ("__") with a dot (".") and lowercase the name.
        3. Drop values of known options that have the wrong type. An int is accepted for a float
            option, and converted.
        """
        output = {}
        for name, value in new_options.items():
            if value is None:
                continue
            name = name.replace("__", ".").lower()
            info = OPTIONS_INFO.get(name)
            if info is not None:
                if info.type is float and isinstance(value, int) and not isinstance(value, bool):
                    value = float(value)
                elif not isinstance(value, info.type) \
                        or (info.type is int and isinstance(value, bool)):
                    LOG.warning("ignoring value %r for option '%s' of type %s", value, name,
                            getattr(info.type, '__name__', info.type))
                    continue
            output[name] = value
        return output

    def is_set(self, key: str) -> bool:
        """@brief Return whether any layer has a value for the option, even if it equals the default."""
        return any(key in layer for layer in self._layers)

    def get_default(self, key: str) -> Any:
        """@brief Return the default value for the specified option."""
        if key in OPTIONS_INFO:
            return OPTIONS_INFO[key].default
        else:
            return None

    def get(self, key: str) -> Any:
        """@brief Return the highest priority value for the option, or its default."""
        for layer in self._layers:
            if key in layer:
                return layer[key]
        return self.get_default(key)

    def set(self, key: str, value: Any) -> None:
        """@brief Set an option in the current highest priority layer."""
        self.update({key: value})

    def update(self, new_options: Mapping[str, Any]) -> None:
        """@brief Set multiple options in the current highest priority layer."""
        filtered_options = self._convert_options(new_options)
        previous_values = {name: self.get(name) for name in filtered_options.keys()}
        self._layers[0].update(filtered_options)
        self._notify_changes(previous_values, filtered_options)

    def _notify_changes(self, previous: Dict[str, Any], options: Dict[str, Any]) -> None:
        for name, new_value in options.items():
            previous_value = previous[name]
            if new_value != previous_value:
                self.notify(name, data=OptionChangeInfo(new_value, previous_value))

    def __contains__(self, key: str) -> bool:
        return self.is_set(key)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)
