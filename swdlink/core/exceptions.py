# swdlink
# Copyright (c) 2006-2013,2018-2019 Arm Limited
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

class Error(RuntimeError):
    """@brief Parent of all errors swdlink can raise"""
    pass

class TimeoutError(Error):
    """@brief A polled condition did not become true in time"""
    pass

class ProbeError(Error):
    """@brief Error communicating with the debug probe"""
    pass

class DeviceNotFoundError(ProbeError):
    """@brief No USB device matching the requested VID/PID (and serial number) was found"""
    pass

class CouldNotOpenError(ProbeError):
    """@brief The USB device was found but could not be opened"""
    pass

class PermissionDeniedError(CouldNotOpenError):
    """@brief The USB device could not be opened due to insufficient permissions"""
    pass

class InterfaceNotFoundError(ProbeError):
    """@brief The device has neither a CMSIS-DAP HID interface nor a vendor bulk interface"""
    pass

class TransportError(ProbeError):
    """@brief Low level USB transfer failure"""
    pass

class TransportTimeoutError(TransportError):
    """@brief A USB transfer did not complete within the timeout"""
    pass

class ProtocolError(ProbeError):
    """@brief The probe returned a response that does not fit the request"""
    pass

class ProtocolMismatchError(ProtocolError):
    """@brief A response header disagrees with the request.

    This indicates either firmware desynchronisation or a command the firmware does not support.
    """
    pass

class TruncatedResponseError(ProtocolError):
    """@brief The response is shorter than the decoders of the batch require"""
    pass

class CommandFailedError(ProbeError):
    """@brief The probe reported failure status for a command"""
    pass

class TransferError(ProbeError):
    """@brief Error occurred with a register transfer over SWD"""
    pass

class TransferIncompleteError(TransferError):
    """@brief A DAP_Transfer command did not complete all of the requested register operations.

    The values read by operations that did complete are retained in the `values` attribute. The
    ACK value returned by the probe and the number of completed operations are also available.

    Positional arguments passed to the constructor are passed through to the superclass'
    constructor. Keyword arguments of 'ack', 'completed', 'requested', and 'values' initialize the
    corresponding attributes.
    """
    def __init__(self, *args, **kwargs):
        super().__init__(*args)
        self._ack = kwargs.get('ack', None)
        self._completed = kwargs.get('completed', None)
        self._requested = kwargs.get('requested', None)
        self._values = list(kwargs.get('values', []))

    @property
    def ack(self):
        return self._ack

    @property
    def completed(self):
        return self._completed

    @property
    def requested(self):
        return self._requested

    @property
    def values(self):
        return self._values

    def __str__(self):
        desc = "Register transfer incomplete"
        if self.args:
            if len(self.args) == 1:
                desc += " (" + str(self.args[0]) + ")"
            else:
                desc += " " + str(self.args) + ""
        parts = []
        if self._completed is not None:
            if self._requested is not None:
                parts.append("%d of %d ops" % (self._completed, self._requested))
            else:
                parts.append("%d ops" % self._completed)
        if self._ack is not None:
            parts.append("ack 0x%x" % self._ack)
        if parts:
            desc += " [%s]" % ", ".join(parts)
        return desc

class BatchTooLargeError(Error):
    """@brief A sub-command does not fit in the remaining packet space of a batch"""
    pass

class LinkError(Error):
    """@brief Bring-up of the SWD link failed at a particular stage.

    The `stage` attribute is the link state that could not be reached. The underlying error is
    available both as the `cause` attribute and as the exception's `__cause__`.
    """
    def __init__(self, stage, cause=None):
        super().__init__(stage, cause)
        self._stage = stage
        self._cause = cause

    @property
    def stage(self):
        return self._stage

    @property
    def cause(self):
        return self._cause

    def __str__(self):
        name = getattr(self._stage, 'name', str(self._stage))
        desc = "SWD link bring-up failed at stage %s" % name
        if self._cause is not None:
            desc += ": %s" % self._cause
        return desc

class CommandError(Error):
    """@brief Raised when a command encounters an error."""
    pass
