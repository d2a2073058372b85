from pathlib import Path

# the source tree root holds VERSION.txt, config/ and migrations/
root = Path(__file__).resolve().parent.parent
__version__ = (root / "VERSION.txt").read_text(encoding="utf8").strip()
