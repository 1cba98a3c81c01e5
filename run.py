"""Start Classboard from a source checkout: python run.py"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from classboard.main import main

if __name__ == "__main__":
    sys.exit(main())
