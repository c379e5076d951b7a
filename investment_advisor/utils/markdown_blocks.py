# Role: Split an assistant message into prose and fenced code blocks. The UI renders prose with st.markdown
# and hands each code block to st.code keyed by its fence language (syntax highlighting).

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Literal, Optional

# Key line: up to three spaces of indent; deeper fences belong to list items and stay in the prose.
_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})\s*([\w+#.-]*)")


@dataclass(frozen=True)
class MarkdownSegment:
    kind: Literal["markdown", "code"]
    text: str
    language: Optional[str] = None


def split_markdown(text: str) -> List[MarkdownSegment]:
    # 1) Walk lines; an opening fence starts a code segment (language = tag after the fence)
    # 2) The same fence char, at least as long, closes it
    # 3) Unterminated fences run to the end of the text
    segments: List[MarkdownSegment] = []
    prose: List[str] = []
    code: List[str] = []
    fence: Optional[str] = None
    language: Optional[str] = None

    def flush_prose() -> None:
        body = "\n".join(prose).strip("\n")
        if body.strip():
            segments.append(MarkdownSegment(kind="markdown", text=body))
        prose.clear()

    for line in (text or "").splitlines():
        if fence is None:
            m = _FENCE.match(line)
            if m:
                flush_prose()
                fence = m.group(1)
                language = m.group(2) or None
                continue
            prose.append(line)
            continue

        stripped = line.strip()
        indent = len(line) - len(line.lstrip(" "))
        if indent <= 3 and stripped and set(stripped) == {fence[0]} and len(stripped) >= len(fence):
            segments.append(MarkdownSegment(kind="code", text="\n".join(code), language=language))
            code.clear()
            fence = None
            language = None
            continue
        code.append(line)

    if fence is not None:
        segments.append(MarkdownSegment(kind="code", text="\n".join(code), language=language))
    flush_prose()
    return segments
