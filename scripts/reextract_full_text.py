"""Re-derive full_text in saved ordinance files from their content (no re-crawling)."""
from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from jorei_crawler.parse import extract_plain_text

OUTPUT_DIR = ROOT / "output"


def main() -> None:
    output_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else OUTPUT_DIR
    if not output_dir.exists():
        print(f"{output_dir} not found")
        return
    count = 0
    for path in sorted(output_dir.glob("*.json")):
        data = json.loads(path.read_text(encoding="utf-8"))
        data["full_text"] = extract_plain_text(data.get("content"))
        path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        count += 1
    print(f"Re-extracted full text for {count} ordinances in {output_dir}")


if __name__ == "__main__":
    main()
