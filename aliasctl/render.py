"""Side-by-side diff used to preview shell file changes"""

import re
from difflib import SequenceMatcher
from typing import List

from rich.console import Console
from rich.table import Table
from rich.text import Text

REMOVED = "bold red"
ADDED = "bold green"


class Render:
    """Render old and new versions of a file next to each other"""

    def _split_keep_ws(self, line: str) -> List[str]:
        return re.split(r"(\s+)", line)

    def _word_level_text(self, left: str, right: str, side: str) -> Text:
        """Highlight the words of one side that differ from the other"""
        if side not in ("left", "right"):
            raise ValueError("side must be 'left' or 'right'")

        left_tokens = self._split_keep_ws(left)
        right_tokens = self._split_keep_ws(right)
        text = Text()
        matcher = SequenceMatcher(None, left_tokens, right_tokens)
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if side == "left":
                style = REMOVED if tag in ("replace", "delete") else None
                tokens = left_tokens[i1:i2]
            else:
                style = ADDED if tag in ("replace", "insert") else None
                tokens = right_tokens[j1:j2]
            for token in tokens:
                text.append(token, style=style)
        return text

    def side_by_side_diff(self, old: str, new: str) -> None:
        old_lines = old.splitlines()
        new_lines = new.splitlines()

        console = Console()
        table = Table(show_header=True, header_style="bold", expand=True)
        table.add_column("Current", overflow="fold")
        table.add_column("After apply", overflow="fold")

        matcher = SequenceMatcher(None, old_lines, new_lines)
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                for line in old_lines[i1:i2]:
                    table.add_row(Text(line), Text(line))
            elif tag == "delete":
                for line in old_lines[i1:i2]:
                    table.add_row(Text(line, style=REMOVED), Text(""))
            elif tag == "insert":
                for line in new_lines[j1:j2]:
                    table.add_row(Text(""), Text(line, style=ADDED))
            elif tag == "replace":
                left_block = old_lines[i1:i2]
                right_block = new_lines[j1:j2]
                for k in range(max(len(left_block), len(right_block))):
                    left = left_block[k] if k < len(left_block) else ""
                    right = right_block[k] if k < len(right_block) else ""
                    table.add_row(
                        self._word_level_text(left, right, "left"),
                        self._word_level_text(left, right, "right"),
                    )
            else:
                raise ValueError(f"Unknown tag: {tag}")

        console.print(table)
