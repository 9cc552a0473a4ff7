# swdlink
# Copyright (c) 2018-2020 Arm Limited
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

from typing import Iterable

def format_hex_bytes(data: Iterable[int]) -> str:
    """@brief Space separated two-digit hex bytes, as used in packet trace logs."""
    return ' '.join(f'{b:02x}' for b in data)

def dump_packet_to_str(data: bytes, strip_padding: bool = True) -> str:
    """@brief Format a packet as hex lines of 16 bytes.

    Each line is prefixed with the offset of its first byte. There is an extra space after every
    8 bytes. Trailing zero padding is removed unless _strip_padding_ is False, in which case the
    full packet is shown.

    @code
    0000:  7f 02 00 04 05 31 2e 30  00 ...
    @endcode
    """
    data = bytes(data)
    if strip_padding:
        data = data.rstrip(b'\x00')
    lines = []
    for offset in range(0, len(data), 16):
        chunk = data[offset:offset + 16]
        first = format_hex_bytes(chunk[:8])
        second = format_hex_bytes(chunk[8:])
        line = f"{offset:04x}:  {first}"
        if second:
            line += "  " + second
        lines.append(line)
    return "\n".join(lines)
