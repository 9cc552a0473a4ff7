# swdlink
# Copyright (c) 2017-2019 Arm Limited
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

from time import (time, sleep)
from typing import Optional

class Timeout:
    """@brief Timeout helper context manager.

    The loop must exit with a break in the successful case, and the else clause of the while loop
    handles the timeout:

    @code
    with Timeout(5, sleeptime=0.01) as t_o:
        while t_o.check():
            if poll_status():
                break
        else:
            raise SomeError("timed out")
    @endcode

    With a non-zero _sleeptime_, check() sleeps before returning starting with its second call.
    A timeout of None never expires.
    """

    def __init__(self, timeout: Optional[float], sleeptime: float = 0) -> None:
        self._sleeptime = sleeptime
        self._timeout = timeout
        self._timed_out = False
        self._start = -1.0
        self._is_first_check = True

    def __enter__(self) -> "Timeout":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        pass

    def start(self) -> None:
        """@brief Start or restart the timeout period."""
        self._start = time()
        self._timed_out = False
        self._is_first_check = True

    def check(self, autosleep: bool = True) -> bool:
        """@brief Check for timeout and possibly sleep.

        @retval True The timeout has _not_ occurred.
        @retval False Timeout has passed and the loop should be exited.
        """
        if (self._timeout is not None) and ((time() - self._start) > self._timeout):
            self._timed_out = True
        elif (not self._is_first_check) and autosleep and self._sleeptime:
            sleep(self._sleeptime)
        self._is_first_check = False
        return not self._timed_out

    @property
    def did_time_out(self) -> bool:
        """@brief Whether the timeout has occurred as of now."""
        self.check(autosleep=False)
        return self._timed_out
