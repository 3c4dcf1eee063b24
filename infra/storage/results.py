import json
from pathlib import Path
from typing import Any


class ResultWriter:
    """Writes one JSON file per result artifact.

    Files are named {prefix}-{kind}-{index}.json, e.g. test-profile-12.json.
    Writes go through a temp file and a rename, so a crash never leaves a
    half-written result behind.
    """

    def __init__(self, output_dir: Path, prefix: str = "test"):
        self.output_dir = Path(output_dir).expanduser().resolve()
        self.prefix = prefix

    def path_for(self, kind: str, index: int) -> Path:
        return self.output_dir / f"{self.prefix}-{kind}-{index}.json"

    def write(self, kind: str, index: int, payload: Any) -> Path:
        output_file = self.path_for(kind, index)
        temp_file = output_file.with_suffix('.json.tmp')

        self.output_dir.mkdir(parents=True, exist_ok=True)

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(payload, f)

            temp_file.replace(output_file)

        except Exception as e:
            if temp_file.exists():
                temp_file.unlink()
            raise e

        return output_file
