from __future__ import annotations

import sys

from site_builder.cli import main

sys.exit(main())
