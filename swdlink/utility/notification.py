# swdlink
# Copyright (c) 2016-2019 Arm Limited
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
from typing import (Any, Callable, Dict, Hashable, Iterable, List, Optional, Union)

LOG = logging.getLogger(__name__)

TRACE = LOG.getChild("trace")
TRACE.setLevel(logging.CRITICAL)

class Notification:
    """@brief Holds information about a notification to subscribers."""

    def __init__(self, event: Hashable, source: Any, data: Any = None) -> None:
        self._event = event
        self._source = source
        self._data = data

    @property
    def event(self) -> Hashable:
        return self._event

    @property
    def source(self) -> Any:
        return self._source

    @property
    def data(self) -> Any:
        return self._data

    def __repr__(self) -> str:
        return "<Notification@0x%08x event=%r source=%r data=%r>" % (id(self), self.event, self.source, self.data)

NotificationCallback = Callable[[Notification], None]

class _EventSubscribers:
    """@brief Subscribers for one event, both for any source and per source."""

    def __init__(self) -> None:
        self.any_source: List[NotificationCallback] = []
        self.by_source: Dict[Any, List[NotificationCallback]] = {}

    def for_source(self, source: Any) -> List[NotificationCallback]:
        return self.any_source + self.by_source.get(source, [])

    def remove(self, cb: NotificationCallback) -> None:
        if cb in self.any_source:
            self.any_source.remove(cb)
        for callbacks in self.by_source.values():
            if cb in callbacks:
                callbacks.remove(cb)

def _as_event_list(events: Union[Hashable, Iterable[Hashable]]) -> List[Hashable]:
    if isinstance(events, (tuple, list, set)):
        return list(events)
    return [events]

class Notifier:
    """@brief Mix-in class that provides notification broadcast capabilities.

    Subscribers register callbacks for one or more events, optionally filtered by the object that
    sends them (the source). Events are any hashable object; enums and option names are typical.
    Callbacks receive a single Notification instance.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[Hashable, _EventSubscribers] = {}

    def subscribe(self, cb: NotificationCallback, events: Union[Hashable, Iterable[Hashable]],
            source: Any = None) -> None:
        """@brief Subscribe to a selection of events from an optional source.

        @param self
        @param cb Callable invoked with a Notification when a matching event is sent.
        @param events Either a single event or a list, tuple, or set of events.
        @param source If not None, the callback is only invoked for events sent from this source.
        """
        for event in _as_event_list(events):
            info = self._subscribers.setdefault(event, _EventSubscribers())
            if source is None:
                info.any_source.append(cb)
            else:
                info.by_source.setdefault(source, []).append(cb)

    def unsubscribe(self, cb: NotificationCallback,
            events: Optional[Union[Hashable, Iterable[Hashable]]] = None) -> None:
        """@brief Remove a callback from all subscriptions, or only from the given events."""
        selected = None if events is None else _as_event_list(events)
        for event, info in self._subscribers.items():
            if (selected is None) or (event in selected):
                info.remove(cb)

    def notify(self, event: Hashable, source: Any = None, data: Any = None) -> None:
        """@brief Notify subscribers of an event.

        @param self
        @param event Event to send. It is fine to notify an event nobody subscribed to.
        @param source The object sending the notification. Defaults to self.
        @param data Optional data value sent with the notification.
        """
        info = self._subscribers.get(event)
        subscribers = info.for_source(source) if (info is not None) else []
        if not subscribers:
            TRACE.debug("Not sending notification because no matching subscribers: event=%s", event)
            return

        note = Notification(event, self if (source is None) else source, data)
        TRACE.debug("Sending notification to %d subscribers: %s", len(subscribers), note)
        for cb in subscribers:
            cb(note)
