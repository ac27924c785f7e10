# flowchart/services/normalize.py
import re

FLOWCHART_HEADS = ("flowchart", "graph")

FENCED = re.compile(r"```(?:[\w-]*[ \t]*\n)?([\s\S]*?)```")
ROOT = re.compile(r"\b(?:flowchart|graph)[ \t]+(?:TD|TB|BT|RL|LR)\b", re.IGNORECASE)


def extract_fenced(text: str) -> str:
    if not text:
        return ""
    # ищем ```mermaid ... ``` (язык у блока может быть любым или отсутствовать)
    m = FENCED.search(text)
    return m.group(1).strip() if m else text.strip()


def looks_like_flowchart(code: str) -> bool:
    head = (code or "").strip().lower()
    return head.startswith(FLOWCHART_HEADS)


def extract_diagram(raw: str) -> str:
    """
    1) обрезаем пробелы,
    2) берём содержимое первого fenced-блока (если есть),
    3) отбрасываем «болтовню» до первой головы `flowchart TD`,
    4) если модель прислала несколько диаграмм — оставляем первую.
    Головы нет — отдаём текст как есть, пусть чинит repair.
    """
    s = extract_fenced((raw or "").strip())

    head = ROOT.search(s)
    if not head:
        return s

    s = s[head.start():]
    second = ROOT.search(s, head.end() - head.start())
    if second:
        line_start = s.rfind("\n", 0, second.start()) + 1
        # вторая голова считается только в начале строки, а не внутри подписи
        if not s[line_start:second.start()].strip():
            s = s[:line_start]
    return s.strip()
