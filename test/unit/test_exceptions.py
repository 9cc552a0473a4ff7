# swdlink
# Copyright (c) 2020 Arm Limited
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

import pytest

from swdlink.core.exceptions import *
from swdlink.coresight.link import LinkState

# Tests for TransferIncompleteError.
class TestTransferIncompleteError:
    def test_no_args(self):
        e = TransferIncompleteError()
        assert str(e) == 'Register transfer incomplete'
        assert e.values == []

    def test_msg(self):
        e = TransferIncompleteError("SWD fault")
        assert str(e) == 'Register transfer incomplete (SWD fault)'

    def test_arg_tuple(self):
        e = TransferIncompleteError(-1, 1234)
        assert str(e) == 'Register transfer incomplete (-1, 1234)'

    def test_counts(self):
        e = TransferIncompleteError("SWD fault", ack=4, completed=1, requested=3, values=[0x2ba01477])
        assert e.ack == 4
        assert e.completed == 1
        assert e.requested == 3
        assert e.values == [0x2ba01477]
        assert str(e) == 'Register transfer incomplete (SWD fault) [1 of 3 ops, ack 0x4]'

    def test_completed_only(self):
        e = TransferIncompleteError(completed=2)
        assert str(e) == 'Register transfer incomplete [2 ops]'

    def test_hierarchy(self):
        e = TransferIncompleteError()
        assert isinstance(e, TransferError)
        assert isinstance(e, ProbeError)
        assert isinstance(e, Error)

# Tests for LinkError.
class TestLinkError:
    def test_stage(self):
        cause = CommandFailedError("DAP_CONNECT failed")
        e = LinkError(LinkState.PORT_SELECTED, cause)
        assert e.stage is LinkState.PORT_SELECTED
        assert e.cause is cause
        assert str(e) == 'SWD link bring-up failed at stage PORT_SELECTED: DAP_CONNECT failed'

    def test_no_cause(self):
        e = LinkError(LinkState.READY)
        assert e.cause is None
        assert str(e) == 'SWD link bring-up failed at stage READY'

    def test_plain_stage(self):
        assert str(LinkError("custom")) == 'SWD link bring-up failed at stage custom'

class TestHierarchy:
    @pytest.mark.parametrize("cls", [
        DeviceNotFoundError,
        CouldNotOpenError,
        PermissionDeniedError,
        InterfaceNotFoundError,
        TransportError,
        TransportTimeoutError,
        ProtocolMismatchError,
        TruncatedResponseError,
        CommandFailedError,
        ])
    def test_probe_errors(self, cls):
        assert issubclass(cls, ProbeError)

    def test_protocol_errors(self):
        assert issubclass(ProtocolMismatchError, ProtocolError)
        assert issubclass(TruncatedResponseError, ProtocolError)

    def test_not_probe_errors(self):
        assert not issubclass(BatchTooLargeError, ProbeError)
        assert not issubclass(LinkError, ProbeError)
        assert issubclass(BatchTooLargeError, Error)
        assert issubclass(LinkError, Error)
