# flowchart/services/repair.py
"""
Цепочка правил, которая превращает «почти mermaid» от модели в валидный flowchart.

Порядок правил важен: каждое следующее рассчитывает на форму, оставленную предыдущими.
Повторный прогон цепочки на её же результате ничего не меняет.
"""
import re
import logging
from dataclasses import replace
from itertools import count

from .syntax import ARROW, EdgeLabel, Shape, map_lines, render_line, tokenize_line, FORMS

logger = logging.getLogger("flowchart")

QUOTES = "\"'`“”„«»‘’"
_Q = "[" + re.escape(QUOTES) + "]"

# кавычки вокруг подписи в каждой из фигур; длинные скобки раньше коротких
QUOTED_LABELS = [
    (
        re.compile(re.escape(opener) + r"\s*\\?" + _Q + r"([^\n]*?)\\?" + _Q + r"\s*" + re.escape(closer)),
        opener.replace("\\", "\\\\") + r"\1" + closer.replace("\\", "\\\\"),
    )
    for opener, closer in sorted(FORMS.values(), key=lambda oc: -len(oc[0]))
]
STRAY_QUOTES = re.compile(r"\\?" + _Q)

LABEL_JUNK = re.compile(r"[()\[\]{},:;|]")
SPACES = re.compile(r"\s+")
NON_ID = re.compile(r"[^A-Za-z0-9]")
TEXT_TOKENS = re.compile(r"(" + ARROW.pattern + r"|&|;|\s+)")
ARROW_SPACING = re.compile(r"\s*(" + ARROW.pattern + r")\s*")
CANONICAL_ARROWS = [
    (re.compile(r"^-{2,}>$"), "-->"),
    (re.compile(r"^={2,}>$"), "==>"),
    (re.compile(r"^-\.+->$"), "-.->"),
    (re.compile(r"^-{3,}$"), "---"),
]
ROOT_LINE = re.compile(r"^(?:flowchart|graph)(?:[ \t]+(TD|TB|BT|RL|LR)\b(.*)|[ \t]*)$", re.IGNORECASE)
BARE_NODES = re.compile(r"^[A-Za-z0-9]+(?:\s*&\s*[A-Za-z0-9]+)*$")
# служебные строки mermaid (регистр важен: `End` — обычный id)
DIRECTIVE = re.compile(r"^(?:end|subgraph|style|classDef|class|linkStyle|click|direction)\b(?![\[({])")
DEFAULT_ROOT = "flowchart TD"


def _clean_label(text: str) -> str:
    return SPACES.sub(" ", LABEL_JUNK.sub(" ", text)).strip()


# 1. кавычки
def strip_quotes(text: str) -> str:
    s = text
    for pattern, repl in QUOTED_LABELS:
        s = pattern.sub(repl, s)
    return STRAY_QUOTES.sub("", s)


# 2. скобки: [/..\] → [/../], [[..]] → [..], A[x]] → A[x], незакрытые закрываем
def normalize_brackets(text: str) -> str:
    return map_lines(text, lambda segments: segments)


# 3. подписи фигур
def sanitize_labels(text: str) -> str:
    def fix(segments):
        out = []
        for seg in segments:
            if isinstance(seg, Shape):
                label = _clean_label(seg.label) or _clean_label(seg.node_id)
                if seg.form == "process":
                    # `[/` — это уже параллелограмм
                    label = label.lstrip("/\\").strip()
                # пустую подпись заполнит sanitize_node_ids новым id
                seg = replace(seg, label=label)
            out.append(seg)
        return out

    return map_lines(text, fix)


# 4. id узлов: только латиница и цифры, переименования согласованы по всему документу
def sanitize_node_ids(text: str) -> str:
    renames = {}
    generated = count(1)

    def node_id(raw: str) -> str:
        if raw not in renames:
            renamed = NON_ID.sub("", raw) or f"Node{next(generated)}"
            # `end` зарезервировано в mermaid
            renames[raw] = "End" if renamed == "end" else renamed
        return renames[raw]

    def endpoint(token: str) -> str:
        if not token or TEXT_TOKENS.fullmatch(token):
            return token
        if not any(c.isalnum() for c in token):
            return ""
        return node_id(token)

    def fix(segments):
        # subgraph / end / style ... выбросит enforce_document_shape
        if DIRECTIVE.match(render_line(segments).strip()):
            return segments
        out = []
        for i, seg in enumerate(segments):
            if isinstance(seg, Shape):
                new_id = node_id(seg.node_id)
                seg = replace(seg, node_id=new_id, label=seg.label or new_id)
            elif isinstance(seg, str):
                seg = "".join(endpoint(tok) for tok in TEXT_TOKENS.split(seg))
                # `a--b[x]` → `a b[x]`, иначе при следующем разборе id станет `ab`
                if seg[-1:].isalnum() and i + 1 < len(segments) and isinstance(segments[i + 1], Shape):
                    seg += " "
            out.append(seg)
        return out

    return map_lines(text, fix)


# 5. подписи рёбер: `A -- да --> B` → `A -->|да| B`
def repair_edge_labels(text: str) -> str:
    def fix(segments):
        out = []
        for seg in segments:
            if isinstance(seg, EdgeLabel):
                label = _clean_label(seg.text)
                if seg.loose:
                    out.append(" -->")
                if label:
                    out.append(EdgeLabel(label))
                continue
            out.append(seg)
        return out

    return map_lines(text, fix)


# 6. пробелы
def _canonical_arrow(match) -> str:
    arrow = match.group(1)
    for pattern, canonical in CANONICAL_ARROWS:
        if pattern.match(arrow):
            arrow = canonical
            break
    return f" {arrow} "


def _spaced(segments) -> str:
    parts = []
    for seg in segments:
        if isinstance(seg, EdgeLabel):
            # подпись прилипает к стрелке: `-->|да| B`
            if parts:
                parts[-1] = parts[-1].rstrip(" ")
            parts.append(seg.render() + " ")
        elif isinstance(seg, Shape):
            parts.append(seg.render())
        else:
            chunk = ARROW_SPACING.sub(_canonical_arrow, seg)
            chunk = re.sub(r"[ \t]+", " ", chunk).replace(";", "\n")
            if parts and parts[-1].endswith(" "):
                chunk = chunk.lstrip(" ")
            parts.append(chunk)
    return "".join(parts)


def normalize_whitespace(text: str) -> str:
    lines = []
    for line in (text or "").splitlines():
        if line.strip().startswith("%%"):
            lines.append(line.strip())
            continue
        for piece in _spaced(tokenize_line(line)).split("\n"):
            if piece.strip():
                lines.append(piece.strip())
    return "\n".join(lines)


# 7. документ: одна голова, дальше только узлы и рёбра
def _is_diagram_line(line: str) -> bool:
    if DIRECTIVE.match(line):
        return False
    segments = [seg for seg in tokenize_line(line) if not (isinstance(seg, str) and not seg.strip())]
    if not segments:
        return False
    if isinstance(segments[0], Shape):
        return True
    if any(isinstance(seg, EdgeLabel) or (isinstance(seg, str) and ARROW.search(seg)) for seg in segments):
        return True
    return bool(BARE_NODES.match(line))


def enforce_document_shape(text: str) -> str:
    root, body = None, []
    for line in (text or "").splitlines():
        line = line.strip()
        if not line or line.startswith("%%"):
            continue
        m = ROOT_LINE.match(line)
        if m:
            # повторные головы (вторая диаграмма в ответе) выбрасываем
            if root is None:
                root = f"flowchart {(m.group(1) or 'TD').upper()}"
                rest = (m.group(2) or "").strip()
                if rest and _is_diagram_line(rest):
                    body.append(rest)
            continue
        if _is_diagram_line(line):
            body.append(line)
    return "\n".join([root or DEFAULT_ROOT] + body)


REPAIR_RULES = (
    ("strip_quotes", strip_quotes),
    ("normalize_brackets", normalize_brackets),
    ("sanitize_labels", sanitize_labels),
    ("sanitize_node_ids", sanitize_node_ids),
    ("repair_edge_labels", repair_edge_labels),
    ("normalize_whitespace", normalize_whitespace),
    ("enforce_document_shape", enforce_document_shape),
)


def repair(candidate: str) -> str:
    s = candidate or ""
    for name, rule in REPAIR_RULES:
        try:
            s = rule(s)
        except Exception:
            logger.exception("repair rule %s failed, keeping previous text", name)
    return s
