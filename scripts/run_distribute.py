from pathlib import Path
import sys

# Ensure project root on sys.path for direct script execution
root = Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from sectioner.cli.main import run_pipeline


def main(argv: list[str]) -> int:
    roster = Path(argv[1]) if len(argv) > 1 else root / "data" / "sample_roster.json"
    sections = int(argv[2]) if len(argv) > 2 else 3
    csv, validation, audit = run_pipeline(root, roster, sections)
    print(csv)
    print(validation)
    print(audit)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
