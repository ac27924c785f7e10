# flowchart/services/syntax.py
"""
Разбор строки flowchart на сегменты: обычный текст (id, стрелки),
фигуры (`id[подпись]`, `id{подпись}` ...) и подписи рёбер (`|да|`, `-- да -->`).

Правила repair работают с сегментами, а не с голым текстом,
поэтому чистка подписи никогда не задевает скобки самой фигуры.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

# каноническое написание каждой фигуры
FORMS = {
    "stadium": ("([", "])"),    # start / end
    "cylinder": ("[(", ")]"),   # хранилище
    "input": ("[/", "/]"),
    "output": ("[\\", "\\]"),
    "process": ("[", "]"),
    "decision": ("{", "}"),
    "rounded": ("(", ")"),
}

# что реально пишут модели: открывающая скобка, допустимые закрывающие, форма.
# Порядок важен: сначала длинные открывающие.
SPELLINGS = (
    ("([", ("])", "]"), "stadium"),
    ("((", ("))", ")"), "rounded"),
    ("(", (")",), "rounded"),
    ("[(", (")]", "]"), "cylinder"),
    ("[/", ("/]", "\\]", "]"), "input"),
    ("[\\", ("\\]", "/]", "]"), "output"),
    ("[[", ("]]", "]"), "process"),
    ("[", ("]",), "process"),
    ("{{", ("}}", "}"), "decision"),
    ("{", ("}",), "decision"),
)
PAIRS = {"(": ")", "[": "]", "{": "}"}

ARROW = re.compile(r"-{2,}>|={2,}>|-\.+->|-{3,}")
PIPE_LABEL = re.compile(r"\|([^|\n]*)\|")
LOOSE_LABEL = re.compile(r"(?<![-<=.])--(?![-.>])\s*\|?(?P<text>[^|\n]*?)\|?\s*-{2,}>")
TRAILING_ID = re.compile(r"([^\s>|&;\[\]{}()]+)(\s*)$")
LINK_PIECES = re.compile(r"-{2,}|={2,}|-\.")
ARROW_AHEAD = re.compile(r"\s*(?:" + ARROW.pattern + r")")


@dataclass(frozen=True)
class Shape:
    node_id: str
    form: str
    label: str

    def render(self) -> str:
        opener, closer = FORMS[self.form]
        return f"{self.node_id}{opener}{self.label}{closer}"


@dataclass(frozen=True)
class EdgeLabel:
    text: str
    loose: bool = False  # `-- да -->` вместо `-->|да|`

    def render(self) -> str:
        if self.loose:
            return f"-- {self.text} -->"
        return f"|{self.text}|"


Segment = Union[str, Shape, EdgeLabel]


def _spelling_at(line: str, pos: int):
    for spelling in SPELLINGS:
        if line.startswith(spelling[0], pos):
            return spelling
    return None


def _split_node_id(text: str) -> Optional[Tuple[str, str]]:
    """`A --> B ` → ("A --> ", "B"): id, к которому прилипла фигура."""
    m = TRAILING_ID.search(text)
    if not m:
        return None
    node_id = LINK_PIECES.split(m.group(1))[-1].lstrip("-.=")
    if not node_id:
        return None
    return text[:m.end(1) - len(node_id)], node_id


def _arrow_limit(line: str, start: int) -> int:
    m = ARROW_AHEAD.search(line, start)
    return m.start() if m else len(line)


def _matching(line: str, start: int, opener: str) -> int:
    closer, depth = PAIRS[opener], 1
    for i in range(start, len(line)):
        if line[i] == opener:
            depth += 1
        elif line[i] == closer:
            depth -= 1
            if depth == 0:
                return i
    # скобки внутри подписи не сошлись: берём последнюю закрывающую до стрелки
    return line.rfind(closer, start, _arrow_limit(line, start))


def _earliest(line: str, start: int, closers) -> Optional[Tuple[int, str]]:
    limit = _arrow_limit(line, start)
    best = None
    for closer in closers:
        at = line.find(closer, start, limit + len(closer) - 1)
        # при равной позиции побеждает более длинная (она раньше в списке)
        if at >= 0 and (best is None or at < best[0]):
            best = (at, closer)
    return best


def _read_shape(line: str, pos: int, spelling) -> Tuple[str, str, int]:
    opener, closers, form = spelling
    start = pos + len(opener)
    if len(opener) == 1:
        at = _matching(line, start, opener)
        found = (at, closers[0]) if at >= 0 else None
    else:
        found = _earliest(line, start, closers)

    if found:
        at, closer = found
        label, end = line[start:at], at + len(closer)
    else:
        # незакрытая фигура: подпись до ближайшей стрелки
        end = _arrow_limit(line, start)
        label = line[start:end].strip().rstrip(closers[0][:-1])

    # A[text]] → A[text]
    tail = closers[0][-1]
    while end < len(line) and line[end] == tail:
        end += 1
    return form, label.strip(), end


def tokenize_line(line: str) -> List[Segment]:
    segments: List[Segment] = []
    buf: List[str] = []

    def flush(text: str):
        if text:
            segments.append(text)

    pos, n = 0, len(line)
    while pos < n:
        m = PIPE_LABEL.match(line, pos) or LOOSE_LABEL.match(line, pos)
        if m:
            flush("".join(buf))
            buf = []
            if m.re is PIPE_LABEL:
                segments.append(EdgeLabel(m.group(1).strip()))
            else:
                segments.append(EdgeLabel(m.group("text").strip(), loose=True))
            pos = m.end()
            continue

        spelling = _spelling_at(line, pos)
        split = _split_node_id("".join(buf)) if spelling else None
        if split:
            before, node_id = split
            form, label, pos = _read_shape(line, pos, spelling)
            flush(before)
            buf = []
            segments.append(Shape(node_id, form, label))
            continue

        buf.append(line[pos])
        pos += 1

    flush("".join(buf))
    return segments


def render_line(segments: List[Segment]) -> str:
    return "".join(seg if isinstance(seg, str) else seg.render() for seg in segments)


def map_lines(text: str, fn: Callable[[List[Segment]], List[Segment]]) -> str:
    """Применяет fn к сегментам каждой строки; комментарии `%%` не трогаем."""
    out = []
    for line in (text or "").splitlines():
        if line.strip().startswith("%%"):
            out.append(line)
        else:
            out.append(render_line(fn(tokenize_line(line))))
    return "\n".join(out)

