# swdlink
# Copyright (c) 2006-2013,2018-2021 Arm Limited
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

from enum import Enum

class Command:
    """@brief CMSIS-DAP command IDs used by swdlink."""
    DAP_INFO = 0x00
    DAP_CONNECT = 0x02
    DAP_TRANSFER = 0x05
    DAP_SWJ_CLOCK = 0x11
    DAP_SWJ_SEQUENCE = 0x12
    DAP_QUEUE_COMMANDS = 0x7E
    DAP_EXECUTE_COMMANDS = 0x7F

## Printable names for command IDs, used in error messages.
COMMAND_NAMES = {
    Command.DAP_INFO: "DAP_INFO",
    Command.DAP_CONNECT: "DAP_CONNECT",
    Command.DAP_TRANSFER: "DAP_TRANSFER",
    Command.DAP_SWJ_CLOCK: "DAP_SWJ_CLOCK",
    Command.DAP_SWJ_SEQUENCE: "DAP_SWJ_SEQUENCE",
    Command.DAP_QUEUE_COMMANDS: "DAP_QUEUE_COMMANDS",
    Command.DAP_EXECUTE_COMMANDS: "DAP_EXECUTE_COMMANDS",
    }

def command_name(command_id: int) -> str:
    return COMMAND_NAMES.get(command_id, f"command 0x{command_id:02x}")

class InfoID(Enum):
    """@brief Information IDs for the DAP_Info command."""
    VENDOR = 0x01
    PRODUCT = 0x02
    SER_NUM = 0x03
    FW_VER = 0x04
    DEVICE_VENDOR = 0x05
    DEVICE_NAME = 0x06
    BOARD_VENDOR = 0x07
    BOARD_NAME = 0x08
    PRODUCT_FW_VER = 0x09
    CAPABILITIES = 0xf0
    TEST_DOMAIN_TIMER = 0xf1
    SWO_BUFFER_SIZE = 0xfd
    MAX_PACKET_COUNT = 0xfe
    MAX_PACKET_SIZE = 0xff

# Info IDs that return integer values.
INTEGER_INFOS = [
    InfoID.CAPABILITIES,
    InfoID.TEST_DOMAIN_TIMER,
    InfoID.SWO_BUFFER_SIZE,
    InfoID.MAX_PACKET_COUNT,
    InfoID.MAX_PACKET_SIZE,
    ]

class Capabilities:
    SWD = 0x01
    JTAG = 0x02
    SWO_UART = 0x04
    SWO_MANCHESTER = 0x08
    ATOMIC_COMMANDS = 0x10
    DAP_SWD_SEQUENCE = 0x20

DAP_DEFAULT_PORT = 0
DAP_SWD_PORT = 1
DAP_JTAG_PORT = 2

DAP_OK = 0
DAP_ERROR = 0xff

class DAPTransferResponse:
    """@brief Responses to DAP_Transfer"""
    ACK_MASK = 0x07 # Bits [2:0]
    PROTOCOL_ERROR_MASK = 0x08 # Bit [3]
    VALUE_MISMATCH_MASK = 0x10 # Bit [4]

    # Values for ACK bitfield.
    ACK_OK = 1
    ACK_WAIT = 2
    ACK_FAULT = 4
    ACK_NO_ACK = 7

## Packet size of full speed CMSIS-DAP probes, in both directions.
DEFAULT_PACKET_SIZE = 64

## DAP_ExecuteCommands packet header: command ID and sub-command count.
EXECUTE_COMMANDS_HEADER_SIZE = 2

## The sub-command count of DAP_ExecuteCommands and the op count of DAP_Transfer are single bytes.
MAX_COMMAND_COUNT = 255
