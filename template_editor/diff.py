"""Line diff for reviewing template edits.

``compute`` walks both texts with one cursor each and, on a mismatch, jumps
to whichever side re-synchronises sooner. It is a greedy display aid and
does not produce a minimal edit script.
"""
from dataclasses import dataclass
from typing import List, Optional

ADDED = 'added'
REMOVED = 'removed'
UNCHANGED = 'unchanged'

PREFIXES = {ADDED: '+', REMOVED: '-', UNCHANGED: ' '}


@dataclass(frozen=True)
class DiffLine:
    kind: str
    line: str

    def to_dict(self):
        return {'kind': self.kind, 'line': self.line}


def _find(lines: List[str], value: str, start: int) -> Optional[int]:
    try:
        return lines.index(value, start)
    except ValueError:
        return None


def compute(old_text: str, new_text: str) -> List[DiffLine]:
    old_lines = old_text.split('\n')
    new_lines = new_text.split('\n')
    diff = []
    i = j = 0

    while i < len(old_lines) or j < len(new_lines):
        if i >= len(old_lines):
            diff.append(DiffLine(ADDED, new_lines[j]))
            j += 1
        elif j >= len(new_lines):
            diff.append(DiffLine(REMOVED, old_lines[i]))
            i += 1
        elif old_lines[i] == new_lines[j]:
            diff.append(DiffLine(UNCHANGED, old_lines[i]))
            i += 1
            j += 1
        else:
            found_in_new = _find(new_lines, old_lines[i], j)
            found_in_old = _find(old_lines, new_lines[j], i)

            if found_in_new is not None and (found_in_old is None or found_in_new - j < found_in_old - i):
                while j < found_in_new:
                    diff.append(DiffLine(ADDED, new_lines[j]))
                    j += 1
            elif found_in_old is not None:
                while i < found_in_old:
                    diff.append(DiffLine(REMOVED, old_lines[i]))
                    i += 1
            else:
                diff.append(DiffLine(REMOVED, old_lines[i]))
                diff.append(DiffLine(ADDED, new_lines[j]))
                i += 1
                j += 1

    return diff


def render(diff: List[DiffLine]) -> str:
    return '\n'.join(f"{PREFIXES[entry.kind]} {entry.line}" for entry in diff)


def summarize(diff: List[DiffLine]):
    counts = {ADDED: 0, REMOVED: 0, UNCHANGED: 0}
    for entry in diff:
        counts[entry.kind] += 1
    return counts
