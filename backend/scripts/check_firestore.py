from __future__ import annotations

import sys
from pathlib import Path

root = Path(__file__).resolve().parents[1]
sys.path.append(str(root))

from seeder.commands import check_main


if __name__ == "__main__":
    sys.exit(check_main())
