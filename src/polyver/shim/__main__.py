# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Module entry point used by generated shim scripts."""

from __future__ import annotations

import sys

from ..dispatch.dispatcher import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
