# SPDX-License-Identifier: MIT
"""Allow running as ``python -m polybuild``."""

import sys

from polybuild.cli import main

sys.exit(main())
