import re

_PRODUCT_RE = re.compile(r"product\s*:\s*(?P<name>.+?)(?:\s*\(\s*sku\s*:\s*(?P<sku>[^)]+)\))?\s*$", re.IGNORECASE)
_FIELD_RE = re.compile(r"^(?P<field>action|reasoning)\s*:\s*(?P<value>.*)$", re.IGNORECASE)
_LEADING_MARKUP_RE = re.compile(r"^[\s\-*#>]*(?:\d+[.)]\s*)?")


def _clean_line(line: str) -> str:
    line = line.replace("**", "").replace("__", "")
    return _LEADING_MARKUP_RE.sub("", line).strip()


def parse_product_suggestions(text: str) -> list[dict]:
    """Best-effort extraction of Product/Action/Reasoning blocks from LLM text.

    Lines that do not match a known prefix are appended to the reasoning of
    the current block, so wrapped explanations are kept.
    """
    suggestions = []
    current = None
    for raw_line in (text or "").splitlines():
        line = _clean_line(raw_line)
        if not line:
            continue
        product_match = _PRODUCT_RE.match(line)
        if product_match and line.lower().startswith("product"):
            current = {
                "product": product_match.group("name").strip(),
                "sku": (product_match.group("sku") or "").strip() or None,
                "action": None,
                "reasoning": None,
            }
            suggestions.append(current)
            continue
        if current is None:
            continue
        field_match = _FIELD_RE.match(line)
        if field_match:
            current[field_match.group("field").lower()] = field_match.group("value").strip()
        elif current["reasoning"] is not None:
            current["reasoning"] = "{} {}".format(current["reasoning"], line).strip()
    return suggestions
