# swdlink
# Copyright (c) 2015-2020 Arm Limited
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
from enum import Enum
from typing import (Any, Callable, List, NamedTuple, Optional, Tuple)

from . import (ap, dap)
from ..core import exceptions
from ..core.exceptions import LinkError
from ..probe import swj
from ..probe.pydapaccess.batch import (
    Batch,
    Connect,
    Info,
    SetClock,
    SubCommandSpec,
    Transfer,
    )
from ..probe.pydapaccess.cmsis_dap_core import (
    Capabilities,
    DAP_SWD_PORT,
    DEFAULT_PACKET_SIZE,
    InfoID,
    )
from ..probe.pydapaccess.transfer import (
    Port,
    RegisterOp,
    )
from ..utility.notification import Notifier
from ..utility.timeout import Timeout

LOG = logging.getLogger(__name__)

TRACE = LOG.getChild("trace")
TRACE.setLevel(logging.CRITICAL)

class LinkState(Enum):
    """@brief Stages of SWD link bring-up, in the order they are reached."""
    DISCONNECTED = 0
    PORT_SELECTED = 1
    CLOCK_SET = 2
    SWITCHED_TO_SWD = 3
    LINE_RESET = 4
    ERRORS_CLEARED = 5
    AP_BANK_SELECTED = 6
    POWERED_UP = 7
    READY = 8

class PowerUpPolicy(Enum):
    """@brief How the CTRL/STAT power-up acknowledge bits are checked."""
    ## Read CTRL/STAT once and only warn if the acknowledge bits are clear.
    SINGLE = "single"
    ## Re-read CTRL/STAT until acknowledged or the power-up timeout expires.
    POLL = "poll"
    ## Have the probe wait for the acknowledge bits with a value match read.
    MATCH = "match"

class ProbeInfo(NamedTuple):
    """@brief Identification read from the probe with DAP_Info."""
    vendor: Optional[str]
    product: Optional[str]
    serial_number: Optional[str]
    firmware_version: Optional[str]
    product_firmware_version: Optional[str]
    capabilities: Optional[int]
    max_packet_count: Optional[int]
    max_packet_size: Optional[int]

    @property
    def supports_swd(self) -> bool:
        return bool((self.capabilities or 0) & Capabilities.SWD)

class LinkResult(NamedTuple):
    """@brief Register values observed while bringing up the link."""
    idcode: int
    ctrl_stat: int
    ap_idr: int
    cpuid: int

    @property
    def dpidr(self) -> dap.DPIDR:
        return dap.decode_dpidr(self.idcode)

    @property
    def apidr(self) -> ap.APIDR:
        return ap.decode_ap_idr(self.ap_idr)

class LinkSequencer(Notifier):
    """@brief Brings up an SWD link to a target through a CMSIS-DAP probe.

    Bring-up is a fixed series of stages. Each stage sends exactly one DAP_ExecuteCommands batch
    (the `poll` power-up policy may send more for its stage) and moves the state forward only when
    the whole batch succeeded. A failure raises LinkError naming the stage that was not reached,
    and `state` stays at the last stage that was.

    Each state change is sent to subscribers as an EVENT_STATE_CHANGED notification with the new
    LinkState as data.
    """

    ## Notification event for state changes.
    EVENT_STATE_CHANGED = "swd-link-state-changed"

    ## String infos are read one per batch. Integer infos share a batch.
    _STRING_INFOS = (
        InfoID.VENDOR,
        InfoID.PRODUCT,
        InfoID.SER_NUM,
        InfoID.FW_VER,
        InfoID.PRODUCT_FW_VER,
        )
    _INTEGER_INFOS = (
        InfoID.CAPABILITIES,
        InfoID.MAX_PACKET_COUNT,
        InfoID.MAX_PACKET_SIZE,
        )

    def __init__(self,
            transport,
            interface,
            frequency: int = 1000000,
            packet_size: int = DEFAULT_PACKET_SIZE,
            power_up_policy: PowerUpPolicy = PowerUpPolicy.POLL,
            power_up_timeout: float = dap.DP_POWER_REQUEST_TIMEOUT,
            ) -> None:
        """@brief Constructor.
        @param transport Object with UsbTransport's write() and read() methods.
        @param interface ProbeInterface of the opened probe.
        @param frequency SWD clock frequency in Hz.
        @param packet_size Packet size of the probe.
        @param power_up_policy A PowerUpPolicy, or the name of one.
        @param power_up_timeout Seconds to wait for power-up with the `poll` policy.
        """
        super().__init__()
        self._transport = transport
        self._interface = interface
        self._frequency = frequency
        self._packet_size = packet_size
        self._power_up_policy = PowerUpPolicy(power_up_policy)
        self._power_up_timeout = power_up_timeout
        self._state = LinkState.DISCONNECTED
        self._idcode: Optional[int] = None
        self._ctrl_stat: Optional[int] = None
        self._ap_idr: Optional[int] = None
        self._cpuid: Optional[int] = None

    @property
    def state(self) -> LinkState:
        return self._state

    @property
    def power_up_policy(self) -> PowerUpPolicy:
        return self._power_up_policy

    def _set_state(self, state: LinkState) -> None:
        assert state.value > self._state.value
        LOG.debug("SWD link state: %s -> %s", self._state.name, state.name)
        self._state = state
        self.notify(self.EVENT_STATE_CHANGED, data=state)

    def _execute(self, *specs: SubCommandSpec) -> List[Any]:
        batch = Batch(self._packet_size)
        for spec in specs:
            batch.append(spec)
        return batch.execute(self._transport, self._interface)

    def _transfer(self, *ops: RegisterOp) -> List[int]:
        """@brief Run one DAP_Transfer in its own batch and return the read values."""
        result, = self._execute(Transfer(ops))
        return result.check()

    def read_probe_info(self) -> ProbeInfo:
        """@brief Read probe identification with DAP_Info.

        This does not change the link state and can be called before or after run().

        @exception ProbeError
        """
        strings = [self._execute(Info(info_id))[0] for info_id in self._STRING_INFOS]
        integers = self._execute(*(Info(info_id) for info_id in self._INTEGER_INFOS))
        info = ProbeInfo(*strings, *integers)
        LOG.debug("Probe info: %s", info)
        return info

    def _stage_select_port(self) -> None:
        self._execute(Connect(DAP_SWD_PORT))

    def _stage_set_clock(self) -> None:
        self._execute(SetClock(self._frequency))

    def _stage_switch_to_swd(self) -> None:
        self._execute(swj.jtag_to_swd())

    def _stage_line_reset(self) -> None:
        self._execute(swj.line_reset())

    def _stage_clear_errors(self) -> None:
        # IDCODE must be the first read after a line reset.
        self._idcode, = self._transfer(
                RegisterOp.read_dp(dap.DP_IDR),
                RegisterOp.write_dp(dap.DP_ABORT, dap.ABORT_CLEAR_ERRORS),
                )
        LOG.info("DP %s", dap.decode_dpidr(self._idcode))

    def _stage_select_ap_bank(self) -> None:
        self._transfer(RegisterOp.write_dp(dap.DP_SELECT, dap.select_value(0, ap.AP_IDR_BANK)))

    def _stage_power_up(self) -> None:
        request = RegisterOp.write_dp(dap.DP_CTRL_STAT, dap.POWER_UP_REQUEST)
        read_ctrl_stat = RegisterOp.read_dp(dap.DP_CTRL_STAT)

        if self._power_up_policy is PowerUpPolicy.MATCH:
            self._ctrl_stat, = self._transfer(
                    request,
                    RegisterOp.match_mask(dap.POWER_UP_ACK),
                    RegisterOp.read_match(Port.DP, dap.DP_CTRL_STAT, dap.POWER_UP_ACK),
                    read_ctrl_stat,
                    )
            return

        self._ctrl_stat, = self._transfer(request, read_ctrl_stat)
        if self._is_powered_up(self._ctrl_stat):
            return

        if self._power_up_policy is PowerUpPolicy.SINGLE:
            LOG.warning("Debug and system power-up not acknowledged (CTRL/STAT=0x%08x)", self._ctrl_stat)
            return

        with Timeout(self._power_up_timeout) as time_out:
            while time_out.check():
                self._ctrl_stat, = self._transfer(read_ctrl_stat)
                if self._is_powered_up(self._ctrl_stat):
                    break
            else:
                raise exceptions.TimeoutError("timed out waiting for power-up acknowledge "
                        f"(CTRL/STAT=0x{self._ctrl_stat:08x})")

    @staticmethod
    def _is_powered_up(ctrl_stat: int) -> bool:
        return (ctrl_stat & dap.POWER_UP_ACK) == dap.POWER_UP_ACK

    def _stage_read_ids(self) -> None:
        self._ap_idr, self._cpuid = self._transfer(
                RegisterOp.read_ap(ap.AP_IDR),
                RegisterOp.write_dp(dap.DP_SELECT, dap.select_value(0, 0)),
                RegisterOp.write_ap(ap.MEM_AP_CSW, ap.CSW_WORD_ACCESS),
                RegisterOp.write_ap(ap.MEM_AP_TAR, ap.CPUID_ADDRESS),
                RegisterOp.read_ap(ap.MEM_AP_DRW),
                )
        ap_idr = ap.decode_ap_idr(self._ap_idr)
        LOG.info("AP#0 %s", ap_idr)
        if not ap_idr.is_ahb_ap:
            LOG.warning("AP#0 is not an AHB-AP (IDR=0x%08x); CPUID=0x%08x may be invalid",
                    self._ap_idr, self._cpuid)

    def _stages(self) -> List[Tuple[LinkState, Callable[[], None]]]:
        return [
            (LinkState.PORT_SELECTED, self._stage_select_port),
            (LinkState.CLOCK_SET, self._stage_set_clock),
            (LinkState.SWITCHED_TO_SWD, self._stage_switch_to_swd),
            (LinkState.LINE_RESET, self._stage_line_reset),
            (LinkState.ERRORS_CLEARED, self._stage_clear_errors),
            (LinkState.AP_BANK_SELECTED, self._stage_select_ap_bank),
            (LinkState.POWERED_UP, self._stage_power_up),
            (LinkState.READY, self._stage_read_ids),
            ]

    def run(self) -> LinkResult:
        """@brief Perform every bring-up stage.

        @return LinkResult with the IDCODE, CTRL/STAT, AP IDR and CPUID values.
        @exception LinkError A stage failed. The `stage` attribute is the state that was not
            reached, and the error that caused the failure is chained.
        """
        if self._state is not LinkState.DISCONNECTED:
            raise exceptions.Error(f"SWD link bring-up already run (state {self._state.name})")

        for stage, action in self._stages():
            TRACE.debug("running stage %s", stage.name)
            try:
                action()
            except (exceptions.Error, ValueError) as err:
                raise LinkError(stage, err) from err
            self._set_state(stage)

        return LinkResult(self._idcode, self._ctrl_stat, self._ap_idr, self._cpuid)
