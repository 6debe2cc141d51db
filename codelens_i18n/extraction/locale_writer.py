"""Writer for locale JSON files."""

import json
from pathlib import Path

from ..models.locale_tree import Node, to_json


class LocaleWriter:
    """Writer for locale .json files."""

    indent = 2

    def write(self, tree: Node, output_path: Path) -> None:
        """
        Write a locale tree to disk, overwriting the file.

        Args:
            tree: The locale tree to write
            output_path: Path to write the file to
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_string(tree))
            f.write("\n")  # Trailing newline

    def to_string(self, tree: Node) -> str:
        """
        Convert a locale tree to a JSON string.

        Key order is preserved so rewritten files diff cleanly.
        """
        return json.dumps(to_json(tree), indent=self.indent, ensure_ascii=False)
