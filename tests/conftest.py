import sys
from pathlib import Path

# Import license_finder straight from src/ so the suite runs without installing
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))
