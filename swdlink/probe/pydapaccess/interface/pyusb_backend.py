# swdlink
# Copyright (c) 2006-2021 Arm Limited
# Copyright (c) 2020 Patrick Huesmann
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

import errno
import logging
import platform
from typing import (List, Optional)

import libusb_package
import usb.core
import usb.util

from .common import (
    ProbeInterface,
    generate_device_unique_id,
    select_interface,
    )
from .transport import UsbTransport
from ....core.exceptions import (
    CouldNotOpenError,
    DeviceNotFoundError,
    PermissionDeniedError,
    )

LOG = logging.getLogger(__name__)

UDEV_HELP = ("This can probably be remedied with a udev rule that grants access to the probe "
        "(VID=%04x PID=%04x).")

class UsbProbe:
    """@brief A CMSIS-DAP probe on the USB bus, driven through pyusb.

    Creating the object only reads the device descriptor strings. open() selects the interface,
    detaches a kernel driver bound to it, and claims it; close() undoes those steps. The object
    is also a context manager that opens and closes the probe.
    """

    did_show_no_libusb_warning = False

    def __init__(self, dev, use_hid_out_ep: bool = False, prefer_v2: bool = True,
            timeout: float = UsbTransport.DEFAULT_TIMEOUT) -> None:
        self.vid = dev.idVendor
        self.pid = dev.idProduct
        self.product_name = self._read_descriptor_string(dev, 'product') or f"{dev.idProduct:#06x}"
        self.vendor_name = self._read_descriptor_string(dev, 'manufacturer') or f"{dev.idVendor:#06x}"
        self.serial_number = self._read_descriptor_string(dev, 'serial_number') \
                or generate_device_unique_id(dev.idVendor, dev.idProduct, dev.bus, dev.address)
        self._dev = dev
        self._use_hid_out_ep = use_hid_out_ep
        self._prefer_v2 = prefer_v2
        self._timeout = timeout
        self._interface: Optional[ProbeInterface] = None
        self._transport: Optional[UsbTransport] = None
        self._kernel_driver_was_attached = False

    @staticmethod
    def _read_descriptor_string(dev, name: str) -> Optional[str]:
        try:
            return getattr(dev, name)
        except (usb.core.USBError, ValueError, UnicodeDecodeError, NotImplementedError) as error:
            LOG.debug("Unable to read %s string of USB device (VID=%04x PID=%04x): %s",
                    name, dev.idVendor, dev.idProduct, error)
            return None

    @classmethod
    def get_all_connected_probes(cls, vid: int, pid: int, **kwargs) -> List["UsbProbe"]:
        """@brief Returns a UsbProbe for every connected device with the given VID and PID.

        Extra keyword arguments are passed to the constructor.
        """
        try:
            all_devices = libusb_package.find(find_all=True, idVendor=vid, idProduct=pid)
        except usb.core.NoBackendError:
            if not cls.did_show_no_libusb_warning:
                LOG.warning("CMSIS-DAP probes cannot be detected because no libusb library was found.")
                cls.did_show_no_libusb_warning = True
            return []
        return [cls(dev, **kwargs) for dev in all_devices]

    @classmethod
    def find(cls, vid: int, pid: int, unique_id: Optional[str] = None, **kwargs) -> "UsbProbe":
        """@brief Find a single probe.

        @param vid USB vendor ID.
        @param pid USB product ID.
        @param unique_id Serial number of the probe. If not provided, the first matching probe is
            returned.
        @exception DeviceNotFoundError
        """
        probes = cls.get_all_connected_probes(vid, pid, **kwargs)
        if unique_id is not None:
            probes = [p for p in probes if p.serial_number == unique_id]
        if not probes:
            desc = f"VID={vid:04x} PID={pid:04x}"
            if unique_id is not None:
                desc += f" serial number {unique_id}"
            raise DeviceNotFoundError(f"no probe found with {desc}")
        if len(probes) > 1:
            LOG.info("%d probes found, using %s", len(probes), probes[0].serial_number)
        return probes[0]

    @property
    def is_open(self) -> bool:
        return self._transport is not None

    @property
    def interface(self) -> Optional[ProbeInterface]:
        return self._interface

    @property
    def transport(self) -> Optional[UsbTransport]:
        return self._transport

    @property
    def device(self):
        return self._dev

    def get_string(self, index: int) -> Optional[str]:
        """@brief Read a string descriptor of the device."""
        if index == 0:
            return None
        return usb.util.get_string(self._dev, index)

    def open(self) -> None:
        assert not self.is_open

        # Get the active config. This produces a direct error when permissions are missing on Linux.
        try:
            config = self._dev.get_active_configuration()
        except usb.core.USBError as error:
            if error.errno == errno.EACCES:
                if platform.system() == "Linux":
                    LOG.warning("%s while trying to open probe %s. " + UDEV_HELP,
                            error, self.serial_number, self.vid, self.pid)
                raise PermissionDeniedError(f"Access to probe {self.serial_number} denied") from error
            raise CouldNotOpenError(f"Unable to open probe {self.serial_number}: {error}") from error

        interface = select_interface(config, self.get_string,
                use_hid_out_ep=self._use_hid_out_ep, prefer_v2=self._prefer_v2)
        LOG.debug("Probe %s: using %s", self.serial_number, interface)

        # Detach kernel driver
        self._kernel_driver_was_attached = False
        try:
            if self._dev.is_kernel_driver_active(interface.number):
                LOG.debug("Detaching Kernel Driver of Interface %d from USB device (VID=%04x PID=%04x).",
                        interface.number, self.vid, self.pid)
                self._dev.detach_kernel_driver(interface.number)
                self._kernel_driver_was_attached = True
        except usb.core.USBError as e:
            LOG.warning("USB Kernel Driver Detach Failed ([%s] %s). Attached driver may interfere with "
                    "probe operations.", e.errno, e.strerror)
        except NotImplementedError:
            # Some implementations don't have kernel attach/detach
            LOG.debug("Probe %s: USB kernel driver detaching is not supported. Attached HID driver may "
                    "interfere with probe operations.", self.serial_number)

        # Explicitly claim the interface
        try:
            usb.util.claim_interface(self._dev, interface.number)
        except usb.core.USBError as exc:
            self._reattach_kernel_driver(interface.number)
            if exc.errno == errno.EACCES:
                raise PermissionDeniedError(f"Unable to claim interface for probe {self.serial_number}") from exc
            raise CouldNotOpenError(f"Unable to claim interface for probe {self.serial_number}") from exc

        self._interface = interface
        self._transport = UsbTransport(self._dev, self._timeout)

    def _reattach_kernel_driver(self, interface_number: int) -> None:
        if not self._kernel_driver_was_attached:
            return
        try:
            self._dev.attach_kernel_driver(interface_number)
        except (usb.core.USBError, NotImplementedError) as exception:
            LOG.warning('Exception attaching kernel driver: %s', exception)
        self._kernel_driver_was_attached = False

    def close(self) -> None:
        """@brief Release the interface and give it back to the kernel driver."""
        if not self.is_open:
            return

        LOG.debug("closing probe %s", self.serial_number)
        try:
            usb.util.release_interface(self._dev, self._interface.number)
        except usb.core.USBError as exception:
            LOG.warning("Exception releasing interface: %s", exception)
        self._reattach_kernel_driver(self._interface.number)
        usb.util.dispose_resources(self._dev)
        self._interface = None
        self._transport = None

    def __enter__(self) -> "UsbProbe":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__}@{id(self):x} {self.serial_number} {self.vendor_name} {self.product_name}>"
