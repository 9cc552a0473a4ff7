# swdlink
# Copyright (c) 2019-2021 Arm Limited
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
from base64 import b32encode
from enum import Enum
from hashlib import sha1
from typing import (Callable, NamedTuple, Optional, Tuple, Union)

import usb.core
import usb.util

from ....core.exceptions import InterfaceNotFoundError

LOG = logging.getLogger(__name__)

# USB class codes.
USB_CLASS_HID = 0x03

## Class, subclass and protocol of the legacy CMSIS-DAP HID interface.
HID_INTERFACE_TRIPLE = (USB_CLASS_HID, 0, 0)

VidPidPair = Tuple[int, int]

# USB vendor IDs.
ARM_VID = 0x0d28

# USB VID/PID pairs.
ARM_DAPLINK_ID: VidPidPair = (ARM_VID, 0x0204) # Arm DAPLink firmware

## Interface string prefix that identifies the CMSIS-DAP v2 vendor bulk interface.
CMSIS_DAP_V2_PREFIX = "CMSIS-DAP v2"

class ProtocolGeneration(Enum):
    """@brief Which USB interface flavour a probe is driven through."""
    ## HID interface with interrupt endpoints, or control transfers when an endpoint is absent.
    LEGACY = 1
    ## Vendor specific interface with a pair of bulk endpoints.
    VENDOR_BULK = 2

class ProbeInterface(NamedTuple):
    """@brief Selected probe interface and its endpoint addresses.

    An endpoint address of 0 means the endpoint is not used and packets in that direction go over
    the default control pipe as HID reports instead.
    """
    number: int
    ep_in: int
    ep_out: int
    generation: ProtocolGeneration

    def __str__(self) -> str:
        return (f"interface {self.number} ({self.generation.name.lower()}, "
                f"in 0x{self.ep_in:02x}, out 0x{self.ep_out:02x})")

## Reads a USB string descriptor by index. Returns None if the index is 0.
StringReader = Callable[[int], Optional[str]]

def _interface_name(interface, get_string: StringReader) -> Optional[str]:
    if not interface.iInterface:
        return None
    try:
        return get_string(interface.iInterface)
    except (UnicodeDecodeError, ValueError, usb.core.USBError) as err:
        # Some probes have corrupted interface strings. Such an interface is treated as unnamed.
        LOG.debug("Unable to read name of interface %d: %s", interface.bInterfaceNumber, err)
        return None

def _is_in_endpoint(endpoint) -> bool:
    return usb.util.endpoint_direction(endpoint.bEndpointAddress) == usb.util.ENDPOINT_IN

def select_interface(config, get_string: StringReader, use_hid_out_ep: bool = False,
        prefer_v2: bool = True) -> ProbeInterface:
    """@brief Choose the interface and endpoints used to talk to a CMSIS-DAP probe.

    Only alternate setting 0 of each interface is considered.

    First the legacy HID interface is located by its class triple. Its IN endpoint is always used.
    Its OUT endpoint is used only when _use_hid_out_ep_ is set; otherwise packets are sent with a
    SET_REPORT control request.

    Then, if _prefer_v2_ is set, an interface whose name starts with "CMSIS-DAP v2" replaces the
    legacy selection, but only if both its IN and its OUT endpoint are present.

    @param config The pyusb Configuration to search.
    @param get_string Callable returning the string descriptor for an index.
    @param use_hid_out_ep Use the HID interface's interrupt OUT endpoint.
    @param prefer_v2 Look for a vendor bulk interface that overrides the HID interface.

    @exception InterfaceNotFoundError Neither kind of interface was found.
    """
    selected = None

    for interface in config:
        if interface.bAlternateSetting != 0:
            continue
        triple = (interface.bInterfaceClass, interface.bInterfaceSubClass, interface.bInterfaceProtocol)
        if triple != HID_INTERFACE_TRIPLE:
            continue
        ep_in = 0
        ep_out = 0
        for endpoint in interface:
            if _is_in_endpoint(endpoint):
                ep_in = endpoint.bEndpointAddress
            elif use_hid_out_ep:
                ep_out = endpoint.bEndpointAddress
        selected = ProbeInterface(interface.bInterfaceNumber, ep_in, ep_out, ProtocolGeneration.LEGACY)
        LOG.debug("Found HID %s", selected)
        break

    if prefer_v2:
        for interface in config:
            if interface.bAlternateSetting != 0:
                continue
            name = _interface_name(interface, get_string)
            if (name is None) or not name.startswith(CMSIS_DAP_V2_PREFIX):
                continue

            # The HID selection stands unless both endpoints are found here.
            ep_in = 0
            ep_out = 0
            for endpoint in interface:
                if _is_in_endpoint(endpoint):
                    ep_in = endpoint.bEndpointAddress
                else:
                    ep_out = endpoint.bEndpointAddress

            if ep_in and ep_out:
                selected = ProbeInterface(interface.bInterfaceNumber, ep_in, ep_out,
                        ProtocolGeneration.VENDOR_BULK)
                LOG.debug("Found vendor bulk %s", selected)
                break
            LOG.debug("Ignoring interface %d '%s': missing %s endpoint", interface.bInterfaceNumber,
                    name, "OUT" if ep_in else "IN")

    if selected is None:
        raise InterfaceNotFoundError("no CMSIS-DAP interface found on the device")
    return selected

def generate_device_unique_id(vid: int, pid: int, *locations: Union[int, str]) -> str:
    """@brief Generate a semi-stable unique ID from USB device properties.

    This function is intended to be used in cases where a device does not provide a serial number
    string. A valid unique ID is still needed so the device can be selected from amongst multiple
    connected devices. The ID is stable for a given device as long as it is connected to the same
    USB port.

    @param vid Vendor ID.
    @param pid Product ID.
    @param locations Additional parameters are expected to be int or string values that represent
        parts of the bus location to which the device is connected. At least one location parameter
        must be provided.
    @return Unique ID string generated from parameters.
    """
    s = f"{vid:04x},{pid:04x}," + ",".join(str(l) for l in locations)
    return b32encode(sha1(s.encode()).digest()).decode('ascii')
