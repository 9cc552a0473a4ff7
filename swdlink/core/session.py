# swdlink
# Copyright (c) 2018-2020 Arm Limited
# Copyright (c) 2021-2022 Chris Reed
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
from types import TracebackType
from typing import (Any, Mapping, Optional)

from . import exceptions
from .options_manager import OptionsManager
from ..coresight.link import (
    LinkResult,
    LinkSequencer,
    PowerUpPolicy,
    ProbeInfo,
    )
from ..probe.pydapaccess.interface.pyusb_backend import UsbProbe
from ..utility.notification import NotificationCallback

LOG = logging.getLogger(__name__)

class Session:
    """@brief A connection to one CMSIS-DAP probe.

    The session owns the option values and the probe. Options are merged from the _options_
    parameter and any keyword arguments, with keyword arguments taking precedence. The
    _option_defaults_ parameter has the lowest priority.

    If no probe is passed to the constructor, open() finds one using the `probe.vid` and
    `probe.pid` options and the optional _unique_id_.

    A Session instance can be used as a context manager. The session will, by default, be
    automatically opened when the context is entered, and closed when the **with** block is exited.
    If an exception is raised while opening a session inside a **with** statement, the session is
    closed to undo any partial initialisation.
    """

    def __init__(
            self,
            probe: Optional[UsbProbe] = None,
            unique_id: Optional[str] = None,
            auto_open: bool = True,
            options: Optional[Mapping[str, Any]] = None,
            option_defaults: Optional[Mapping[str, Any]] = None,
            **kwargs
            ) -> None:
        self._probe = probe
        self._unique_id = unique_id
        self._auto_open = auto_open
        self._closed = True
        self._sequencer: Optional[LinkSequencer] = None

        self._options = OptionsManager()
        self._options.add_back(kwargs)
        self._options.add_back(options)
        self._options.add_back(option_defaults)

    @property
    def options(self) -> OptionsManager:
        return self._options

    @property
    def probe(self) -> Optional[UsbProbe]:
        return self._probe

    @property
    def is_open(self) -> bool:
        return not self._closed

    @property
    def log_tracebacks(self) -> bool:
        """@brief Quick access to debug.traceback option."""
        return self.options.get('debug.traceback')

    @property
    def link(self) -> Optional[LinkSequencer]:
        """@brief The link sequencer of the last bring-up, or None."""
        return self._sequencer

    def __enter__(self) -> "Session":
        if self._auto_open:
            try:
                self.open()
            except Exception:
                self.close()
                raise
        return self

    def __exit__(self, exc_type: type, value: Any, traceback: TracebackType) -> bool:
        self.close()
        return False

    def find_probe(self) -> UsbProbe:
        """@brief Locate the probe selected by the options and unique ID."""
        return UsbProbe.find(
                self.options.get('probe.vid'),
                self.options.get('probe.pid'),
                self._unique_id,
                use_hid_out_ep=self.options.get('cmsis_dap.use_hid_out_ep'),
                prefer_v2=not self.options.get('cmsis_dap.prefer_v1'),
                timeout=self.options.get('usb.timeout'),
                )

    def open(self) -> None:
        """@brief Open the probe, finding it first if necessary.

        @exception DeviceNotFoundError
        @exception CouldNotOpenError
        @exception InterfaceNotFoundError
        """
        if not self._closed:
            return
        if self._probe is None:
            self._probe = self.find_probe()
        self._probe.open()
        self._closed = False
        LOG.debug("opened session with probe %s", self._probe.serial_number)

    def close(self) -> None:
        """@brief Close the probe. Harmless if the session is not open."""
        if self._closed:
            return
        self._closed = True

        LOG.debug("closing session")
        if (self._probe is not None) and self._probe.is_open:
            try:
                self._probe.close()
            except exceptions.Error:
                LOG.error("Probe error during close:", exc_info=self.log_tracebacks)

    def create_link_sequencer(self) -> LinkSequencer:
        """@brief Build a LinkSequencer for the open probe, configured from the options."""
        if self._closed:
            raise exceptions.Error("session is not open")
        policy_name = self.options.get('swd.power_up.policy')
        try:
            policy = PowerUpPolicy(policy_name.strip().lower())
        except ValueError:
            raise exceptions.Error(f"invalid swd.power_up.policy value '{policy_name}'") from None
        return LinkSequencer(
                self._probe.transport,
                self._probe.interface,
                frequency=self.options.get('frequency'),
                packet_size=self.options.get('cmsis_dap.packet_size'),
                power_up_policy=policy,
                power_up_timeout=self.options.get('swd.power_up.timeout'),
                )

    def read_probe_info(self) -> ProbeInfo:
        """@brief Read the probe's DAP_Info identification."""
        return self.create_link_sequencer().read_probe_info()

    def bring_up(self, on_state_changed: Optional[NotificationCallback] = None) -> LinkResult:
        """@brief Run SWD link bring-up.

        @param on_state_changed Optional callback subscribed to the sequencer's state change
            notifications.
        @exception LinkError
        """
        self._sequencer = self.create_link_sequencer()
        if on_state_changed is not None:
            self._sequencer.subscribe(on_state_changed, LinkSequencer.EVENT_STATE_CHANGED)
        return self._sequencer.run()
