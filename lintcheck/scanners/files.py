from __future__ import annotations

import glob
import os


class FileDiscovery:
    """Expands a glob pattern into the ordered list of files to lint.

    Relative patterns are resolved against the working directory and the
    matched paths are returned as glob produced them, so annotation paths
    stay relative to the repository root. ``**`` matches nested directories
    and ``{a,b}`` alternatives are expanded before matching.
    """

    name = "file_discovery"

    def scan(self, pattern: str) -> list[str]:
        files = []
        for expanded in expand_braces(pattern):
            files.extend(m for m in glob.glob(expanded, recursive=True) if os.path.isfile(m))
        return sorted(dict.fromkeys(files))


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` groups, including nested ones, into plain glob patterns.

    A group without a top-level comma, or with no closing brace, is kept
    literally.
    """
    depth = 0
    start = -1
    commas: list[int] = []
    for i, ch in enumerate(pattern):
        if ch == "{":
            if depth == 0:
                start = i
                commas = []
            depth += 1
        elif ch == "}" and depth:
            depth -= 1
            if depth == 0:
                if not commas:
                    rest = expand_braces(pattern[i + 1:])
                    return [pattern[:i + 1] + tail for tail in rest]
                head, tail = pattern[:start], pattern[i + 1:]
                bounds = [start, *commas, i]
                expanded = []
                for lo, hi in zip(bounds, bounds[1:]):
                    expanded.extend(expand_braces(head + pattern[lo + 1:hi] + tail))
                return expanded
        elif ch == "," and depth == 1:
            commas.append(i)
    return [pattern]
