# flowchart/prompt_presets.py

# словарь классификатора; можно переопределить через settings.FLOWCHART_ALGORITHM_KEYWORDS
ALGORITHM_KEYWORDS = [
    "algorithm", "sort", "search", "loop", "iterate", "function", "method",
    "procedure", "step", "process", "condition", "if", "else", "while",
    "for", "binary search", "bubble sort", "quick sort", "merge sort",
    "linear search", "depth first", "breadth first", "recursive", "dynamic programming",
    "flowchart", "diagram", "pseudocode", "input", "output", "variable",
    "array", "list", "tree", "graph", "node", "edge", "traversal",
    "implementation", "execute", "run", "compute", "calculate", "solve",
    "optimize", "efficient", "complexity", "big o", "time complexity",
    "space complexity", "data structure", "programming", "code",
    "logic", "sequence", "workflow", "automation", "processing",
]

EMPTY_INPUT_MESSAGE = "Please enter an algorithm description."
NOT_ALGORITHM_MESSAGE = (
    "This doesn't appear to be an algorithm description. Please describe a process, "
    "procedure, or algorithm with steps, conditions, or technical terms."
)

SHAPE_RULES = """MANDATORY SHAPE RULES:
1. Start/End: ([Start]) and ([End]) - ovals
2. Input: [/Input Text/] - parallelogram (left slant)
3. Output: [\\Output Text\\] - parallelogram (right slant)
4. Process: [Process Step] - rectangle
5. Decision: {Question?} - diamond
6. Storage/Database: [(Database)] - cylinder"""

SYNTAX_RULES = """CRITICAL SYNTAX RULES:
1. Use ONLY "flowchart TD" format
2. Node IDs: simple letters/numbers (A, B, C1, Input1, etc.)
3. NO quotes around text
4. Decision branches: D -->|Yes| E or D -->|No| F
5. Keep labels under 18 characters
6. NO special characters in node IDs"""

EXAMPLE_DIAGRAM = """flowchart TD
    Start([Start])
    Input1[/Get Material Name/]
    Process1[Convert to Lowercase]
    Decision1{In Ductile List?}
    Output1[\\Return Ductile\\]
    Decision2{In Brittle List?}
    Output2[\\Return Brittle\\]
    Output3[\\Return Unknown\\]
    End([End])

    Start --> Input1
    Input1 --> Process1
    Process1 --> Decision1
    Decision1 -->|Yes| Output1
    Decision1 -->|No| Decision2
    Decision2 -->|Yes| Output2
    Decision2 -->|No| Output3
    Output1 --> End
    Output2 --> End
    Output3 --> End"""

PROMPT_TEMPLATE = """You are an expert at converting algorithm descriptions into valid Mermaid flowchart syntax using PROPER FLOWCHART SHAPES.

{shape_rules}

{syntax_rules}

CORRECT EXAMPLE:
{example}

Convert this algorithm using EXACT shape conventions:
{text}

Return ONLY valid Mermaid flowchart code. NO explanations, NO markdown blocks.
"""

# запасные диаграммы, если модель недоступна
FALLBACK_DIAGRAM = """flowchart TD
Start([Start])
Process[Process Algorithm]
End([End])
Start --> Process
Process --> End"""

# модель ответила пустотой: показываем каркас с вводом и выводом
IO_FALLBACK_DIAGRAM = """flowchart TD
Start([Start])
Input[/Read Input/]
Process[Process Input]
Output[\\Show Result\\]
End([End])
Start --> Input
Input --> Process
Process --> Output
Output --> End"""


def build_prompt(text: str) -> str:
    return PROMPT_TEMPLATE.format(
        shape_rules=SHAPE_RULES,
        syntax_rules=SYNTAX_RULES,
        example=EXAMPLE_DIAGRAM,
        text=text,
    )
