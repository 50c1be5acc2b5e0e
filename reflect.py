"""Entry point for the hue reflection pipeline."""
from __future__ import annotations

import sys

from hue_reflect.main_reflect import main


if __name__ == "__main__":
    sys.exit(main())
